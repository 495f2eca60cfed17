"""
Gemini guide generator client.

Sends the guide prompt as a single user turn to the Gemini
generateContent endpoint and returns the text of the first candidate.

One request, one response. No retries, no streaming, no chat history.
"""

import logging
from typing import Any

import httpx

from deckguide.config import USER_AGENT, settings
from deckguide.models.failure import FailureKind, KnownError

logger = logging.getLogger(__name__)


class GenerationTransportError(KnownError):
    """The request failed on the wire, returned an error status, or was not JSON."""

    def __init__(self, detail: str | None = None):
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message="Failed to communicate with the AI. Please try again.",
            detail=detail,
            suggestion="Wait a moment and submit the decklist again.",
            status_code=502,
        )


class GenerationShapeError(KnownError):
    """The response parsed but had no candidates[0].content.parts[0].text."""

    def __init__(self, detail: str | None = None):
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message="The AI returned an unexpected response.",
            detail=detail,
            suggestion="Submit the decklist again.",
            status_code=502,
        )


class GeneratorNotConfiguredError(KnownError):
    """No Gemini API key is configured."""

    def __init__(self) -> None:
        super().__init__(
            kind=FailureKind.SERVICE_UNAVAILABLE,
            message="Gemini API key not configured",
            detail="GEMINI_API_KEY is empty",
            suggestion="Set GEMINI_API_KEY in the environment or .env file.",
            status_code=503,
        )


def build_request_body(prompt: str) -> dict[str, Any]:
    """generateContent body with the prompt as the only user turn."""
    return {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}


def extract_guide_text(payload: Any) -> str:
    """
    Pull candidates[0].content.parts[0].text out of a generateContent response.

    Raises:
        GenerationShapeError: If any step of that path is missing
    """
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise GenerationShapeError(detail=f"Missing field: {e!r}") from e

    if not isinstance(text, str):
        raise GenerationShapeError(detail=f"Expected text string, got {type(text).__name__}")

    return text


class GuideGenerator:
    """Client for the Gemini generateContent endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        api_base: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            api_key: Gemini API key. Defaults to settings.gemini_api_key.
            model: Model name. Defaults to settings.gemini_model.
            api_base: API root. Defaults to settings.gemini_api_base.
            client: Optional shared client, owned by the caller.
        """
        self._api_key = settings.gemini_api_key if api_key is None else api_key
        self._model = model or settings.gemini_model
        self._api_base = (api_base or settings.gemini_api_base).rstrip("/")
        self._client = client

    @property
    def model(self) -> str:
        return self._model

    @property
    def endpoint(self) -> str:
        return f"{self._api_base}/models/{self._model}:generateContent"

    async def generate(self, prompt: str) -> str:
        """
        Generate guide text for a prompt.

        Raises:
            GeneratorNotConfiguredError: If no API key is set
            GenerationTransportError: On network failure, error status or bad JSON
            GenerationShapeError: On a response without the expected text field
        """
        if not self._api_key:
            raise GeneratorNotConfiguredError()

        logger.info("Requesting guide from %s", self._model, extra={"prompt_chars": len(prompt)})

        try:
            if self._client is not None:
                response = await self._post(self._client, prompt)
            else:
                async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
                    response = await self._post(client, prompt)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Gemini returned HTTP %d", e.response.status_code)
            raise GenerationTransportError(detail=f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("Error calling Gemini API: %s", e)
            raise GenerationTransportError(detail=type(e).__name__) from e

        try:
            payload = response.json()
        except ValueError as e:
            logger.error("Gemini response was not valid JSON")
            raise GenerationTransportError(detail="Invalid JSON in response") from e

        try:
            return extract_guide_text(payload)
        except GenerationShapeError:
            logger.error("Unexpected Gemini API response structure: %s", payload)
            raise

    async def _post(self, client: httpx.AsyncClient, prompt: str) -> httpx.Response:
        return await client.post(
            self.endpoint,
            params={"key": self._api_key},
            json=build_request_body(prompt),
            headers={"User-Agent": USER_AGENT, "Content-Type": "application/json"},
        )

"""
Card Resolution Service.

Resolves parsed decklist lines to Scryfall card records.

INVARIANTS:
1. Lines are resolved one at a time, in decklist order
2. Exact lookup first; fallback search only when exact lookup misses
3. Fallback search takes the FIRST match, no ranking
4. Every line is attempted before failing; any failure fails the whole batch
5. Only successful lookups are paced (rate-limit delay after success)
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import httpx

from deckguide.config import USER_AGENT, settings
from deckguide.models.decklist import DecklistLine, ResolutionFailure, ResolvedCard
from deckguide.models.failure import FailureKind, GuideCancelledError, KnownError

logger = logging.getLogger(__name__)


class ResolutionError(KnownError):
    """
    Terminal error raised when one or more decklist lines match no card.

    The message is every per-line message joined by newlines, so the user
    sees the whole report at once.
    """

    def __init__(self, failures: list[ResolutionFailure]):
        self.failures = failures
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message="\n".join(f.message for f in failures),
            detail=f"{len(failures)} card(s) could not be resolved",
            suggestion="Please check the spelling or try an English name.",
            status_code=422,
        )


class CardLookupError(Exception):
    """A single name could not be resolved by either lookup."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


@dataclass
class ResolutionResult:
    """Result of resolving decklist lines against Scryfall."""

    cards: list[ResolvedCard] = field(default_factory=list)
    """Successfully resolved cards, in decklist order."""

    failures: list[ResolutionFailure] = field(default_factory=list)
    """Lines that matched no card, in decklist order."""

    @property
    def all_resolved(self) -> bool:
        """True if every line resolved."""
        return len(self.failures) == 0


class CardResolver:
    """
    Resolves DecklistLine -> ResolvedCard using the live Scryfall API.

    CONTRACT:
    - Input: Parsed decklist lines
    - Output: One ResolvedCard per line OR terminal ResolutionError
    - No partial results from resolve()
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        api_base: str | None = None,
        rate_limit_delay: float | None = None,
    ) -> None:
        """
        Initialize resolver.

        Args:
            client: Optional shared client. When omitted, one is opened per
                    resolve call and closed afterwards.
            api_base: Scryfall base URL. Defaults to settings.
            rate_limit_delay: Seconds to wait after each successful line.
        """
        self._client = client
        self._api_base = (api_base or settings.scryfall_api_base).rstrip("/")
        self._rate_limit_delay = (
            settings.scryfall_rate_limit_delay if rate_limit_delay is None else rate_limit_delay
        )

    @asynccontextmanager
    async def _open_client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return

        async with httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            timeout=settings.http_timeout,
        ) as client:
            yield client

    async def resolve_all(
        self,
        lines: list[DecklistLine],
        cancel: asyncio.Event | None = None,
    ) -> ResolutionResult:
        """
        Resolve every line, collecting failures instead of raising.

        Args:
            lines: Parsed decklist lines
            cancel: Optional event; when set, stops before the next line

        Returns:
            ResolutionResult with resolved cards and failures

        Raises:
            GuideCancelledError: If cancel is set before all lines are done
        """
        result = ResolutionResult()
        logger.info("Resolving %d decklist lines", len(lines))

        async with self._open_client() as client:
            for line in lines:
                if cancel is not None and cancel.is_set():
                    raise GuideCancelledError("card resolution")

                try:
                    card_data = await self._lookup(client, line.name)
                except CardLookupError as e:
                    logger.warning("Could not resolve %r: %s", line.name, e.reason)
                    result.failures.append(ResolutionFailure(line=line, reason=e.reason))
                    continue

                result.cards.append(
                    ResolvedCard(
                        data=card_data,
                        quantity=line.quantity,
                        display_identity=line.identity,
                    )
                )
                await asyncio.sleep(self._rate_limit_delay)

        logger.info(
            "Resolved %d/%d lines",
            len(result.cards),
            len(lines),
            extra={"failures": len(result.failures)},
        )
        return result

    async def resolve(
        self,
        lines: list[DecklistLine],
        cancel: asyncio.Event | None = None,
    ) -> list[ResolvedCard]:
        """
        Resolve every line, raising a single terminal error on ANY failure.

        This is the pipeline entry point.

        Raises:
            ResolutionError: If any line failed (after all lines were tried)
            GuideCancelledError: If cancelled
        """
        result = await self.resolve_all(lines, cancel=cancel)

        if not result.all_resolved:
            raise ResolutionError(result.failures)

        return result.cards

    async def _lookup(self, client: httpx.AsyncClient, name: str) -> dict[str, Any]:
        """Exact lookup, then fallback search."""
        card = await self._exact_lookup(client, name)
        if card is not None:
            return card

        logger.debug("Exact lookup missed for %r, falling back to search", name)
        return await self._search_lookup(client, name)

    async def _exact_lookup(self, client: httpx.AsyncClient, name: str) -> dict[str, Any] | None:
        """Return the card on a 2xx response, None on anything else."""
        try:
            response = await client.get(
                f"{self._api_base}/cards/named",
                params={"exact": name},
            )
        except httpx.HTTPError as e:
            logger.debug("Exact lookup transport error for %r: %s", name, e)
            return None

        if not response.is_success:
            return None

        try:
            data = response.json()
        except ValueError:
            return None

        return data if isinstance(data, dict) else None

    async def _search_lookup(self, client: httpx.AsyncClient, name: str) -> dict[str, Any]:
        """Free-text search; first match wins."""
        generic_reason = f'Scryfall API error for "{name}"'

        try:
            response = await client.get(
                f"{self._api_base}/cards/search",
                params={"q": name},
            )
        except httpx.HTTPError as e:
            logger.debug("Search transport error for %r: %s", name, e)
            raise CardLookupError(generic_reason) from e

        if not response.is_success:
            raise CardLookupError(_error_details(response) or generic_reason)

        try:
            payload = response.json()
        except ValueError as e:
            raise CardLookupError(generic_reason) from e

        matches = payload.get("data") if isinstance(payload, dict) else None
        if not matches:
            raise CardLookupError(f'No cards found matching "{name}" after general search.')

        first: dict[str, Any] = matches[0]
        return first


def _error_details(response: httpx.Response) -> str | None:
    """Pull the human-readable `details` field out of a Scryfall error body."""
    try:
        body = response.json()
    except ValueError:
        return None

    if isinstance(body, dict) and body.get("details"):
        return str(body["details"])
    return None

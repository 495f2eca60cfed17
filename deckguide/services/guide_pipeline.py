"""
Guide generation pipeline.

Sequences the four core steps for one decklist submission:

    raw text -> DecklistLine[] -> ResolvedCard[] -> prompt -> guide text

INVARIANTS:
- Data flows one way; no step feeds an earlier one
- Any failure is terminal; no guide is generated from a partial card list
- One run at a time per pipeline; overlapping runs are rejected, not queued
- A set cancel event stops the run before the next outbound request
"""

import asyncio
import logging
from enum import Enum

from deckguide.models.decklist import GuideResult
from deckguide.models.failure import FailureKind, GuideCancelledError, KnownError
from deckguide.parsers.decklist import parse_decklist
from deckguide.services.card_resolver import CardResolver
from deckguide.services.guide_generator import GuideGenerator
from deckguide.services.guide_prompt import build_guide_prompt

logger = logging.getLogger(__name__)


class DecklistInputError(KnownError):
    """Raised when the submitted text has no usable card lines."""

    def __init__(self) -> None:
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message="Please enter a valid decklist. Format: 'Quantity Card Name'.",
            detail="No valid decklist lines found",
            suggestion="Put one card per line, e.g. '4 Lightning Bolt'.",
            status_code=400,
        )


class PipelineBusyError(KnownError):
    """Raised when a run is requested while another is in flight."""

    def __init__(self) -> None:
        super().__init__(
            kind=FailureKind.CONFLICT,
            message="A deck guide is already being generated.",
            detail="Overlapping pipeline runs are rejected",
            suggestion="Wait for the current guide to finish, then try again.",
            status_code=409,
        )


class PipelineState(str, Enum):
    """Lifecycle of the most recent run, for presentation skins."""

    IDLE = "idle"
    PARSING = "parsing"
    RESOLVING = "resolving"
    GENERATING = "generating"
    DONE = "done"
    FAILED = "failed"


class GuidePipeline:
    """
    Orchestrates one guide generation at a time.

    Presentation skins (HTTP API, CLI) hold a pipeline and call run();
    the pipeline owns no UI state beyond the phase it is in.
    """

    def __init__(
        self,
        resolver: CardResolver | None = None,
        generator: GuideGenerator | None = None,
    ) -> None:
        self._resolver = resolver or CardResolver()
        self._generator = generator or GuideGenerator()
        self._lock = asyncio.Lock()
        self._state = PipelineState.IDLE

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def run(self, text: str, cancel: asyncio.Event | None = None) -> GuideResult:
        """
        Generate a guide for a decklist.

        Args:
            text: Raw decklist text
            cancel: Optional event checked between steps

        Returns:
            GuideResult with resolved cards and guide text

        Raises:
            PipelineBusyError: If another run is in flight
            DecklistInputError: If no card lines were found
            ResolutionError: If any card could not be resolved
            GenerationTransportError / GenerationShapeError: On AI failure
            GuideCancelledError: If cancel was set
        """
        # No await between the check and acquire, so this cannot race
        if self._lock.locked():
            raise PipelineBusyError()

        async with self._lock:
            try:
                result = await self._run(text, cancel)
            except BaseException:
                self._state = PipelineState.FAILED
                raise

            self._state = PipelineState.DONE
            return result

    async def _run(self, text: str, cancel: asyncio.Event | None) -> GuideResult:
        self._state = PipelineState.PARSING
        lines = parse_decklist(text)
        if not lines:
            raise DecklistInputError()
        logger.info("Parsed %d decklist lines", len(lines))

        self._state = PipelineState.RESOLVING
        cards = await self._resolver.resolve(lines, cancel=cancel)

        prompt = build_guide_prompt(cards)

        if cancel is not None and cancel.is_set():
            raise GuideCancelledError("guide generation")

        self._state = PipelineState.GENERATING
        guide = await self._generate(prompt, cancel)
        logger.info("Generated guide", extra={"cards": len(cards), "guide_chars": len(guide)})

        return GuideResult(cards=cards, guide=guide)

    async def _generate(self, prompt: str, cancel: asyncio.Event | None) -> str:
        """Run the generation call, abandoning it if cancel fires first."""
        if cancel is None:
            return await self._generator.generate(prompt)

        generate_task = asyncio.create_task(self._generator.generate(prompt))
        cancel_task = asyncio.create_task(cancel.wait())
        try:
            done, _ = await asyncio.wait(
                {generate_task, cancel_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            generate_task.cancel()
            raise
        finally:
            cancel_task.cancel()

        if generate_task in done:
            return generate_task.result()

        generate_task.cancel()
        logger.info("Guide generation abandoned by caller")
        raise GuideCancelledError("guide generation")

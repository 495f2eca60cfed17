"""Tests for the guide generation pipeline."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from deckguide.models.decklist import DecklistLine, ResolutionFailure, ResolvedCard
from deckguide.models.failure import FailureKind, GuideCancelledError
from deckguide.services.card_resolver import ResolutionError
from deckguide.services.guide_generator import GenerationShapeError
from deckguide.services.guide_pipeline import (
    DecklistInputError,
    GuidePipeline,
    PipelineBusyError,
    PipelineState,
)
from deckguide.services.guide_prompt import GUIDE_SECTIONS


@pytest.fixture
def resolver(resolved_cards: list[ResolvedCard]) -> MagicMock:
    mock = MagicMock()
    mock.resolve = AsyncMock(return_value=resolved_cards)
    return mock


@pytest.fixture
def generator() -> MagicMock:
    mock = MagicMock()
    mock.generate = AsyncMock(return_value="# Deck Archetype and Core Strategy\nBurn.")
    return mock


@pytest.fixture
def pipeline(resolver: MagicMock, generator: MagicMock) -> GuidePipeline:
    return GuidePipeline(resolver=resolver, generator=generator)


class TestGuidePipelineRun:
    async def test_returns_cards_and_guide(
        self,
        pipeline: GuidePipeline,
        resolved_cards: list[ResolvedCard],
    ) -> None:
        result = await pipeline.run("18 Mountain\n4 Lightning Bolt")

        assert result.cards == resolved_cards
        assert result.guide.startswith("# Deck Archetype")
        assert pipeline.state == PipelineState.DONE

    async def test_resolver_receives_parsed_lines(
        self, pipeline: GuidePipeline, resolver: MagicMock
    ) -> None:
        await pipeline.run("Lands\n18 Mountain\n4 Lightning Bolt")

        lines = resolver.resolve.await_args.args[0]
        assert all(isinstance(line, DecklistLine) for line in lines)
        assert [(line.quantity, line.name) for line in lines] == [
            (18, "Mountain"),
            (4, "Lightning Bolt"),
        ]

    async def test_generator_receives_full_prompt(
        self, pipeline: GuidePipeline, generator: MagicMock
    ) -> None:
        await pipeline.run("18 Mountain\n4 Lightning Bolt")

        prompt = generator.generate.await_args.args[0]
        assert "18 Mountain (UNFINITY) - Mana: N/A" in prompt
        for section in GUIDE_SECTIONS:
            assert f"# {section}" in prompt


class TestGuidePipelineFailures:
    async def test_no_card_lines_raises_input_error(
        self, pipeline: GuidePipeline, resolver: MagicMock
    ) -> None:
        with pytest.raises(DecklistInputError) as exc_info:
            await pipeline.run("Creatures\nLands\n")

        assert exc_info.value.kind == FailureKind.INVALID_INPUT
        assert "Quantity Card Name" in exc_info.value.message
        resolver.resolve.assert_not_awaited()
        assert pipeline.state == PipelineState.FAILED

    async def test_resolution_failure_skips_generation(
        self, pipeline: GuidePipeline, resolver: MagicMock, generator: MagicMock
    ) -> None:
        """A partial card list never reaches the generator."""
        line = DecklistLine(quantity=1, name="Notacard", identity="x")
        resolver.resolve.side_effect = ResolutionError(
            [ResolutionFailure(line=line, reason='No cards found matching "Notacard".')]
        )

        with pytest.raises(ResolutionError):
            await pipeline.run("1 Notacard")

        generator.generate.assert_not_awaited()
        assert pipeline.state == PipelineState.FAILED

    async def test_generator_failure_propagates(
        self, pipeline: GuidePipeline, generator: MagicMock
    ) -> None:
        generator.generate.side_effect = GenerationShapeError()

        with pytest.raises(GenerationShapeError):
            await pipeline.run("4 Lightning Bolt")

        assert pipeline.state == PipelineState.FAILED

    async def test_can_run_again_after_failure(
        self, pipeline: GuidePipeline, generator: MagicMock
    ) -> None:
        generator.generate.side_effect = [GenerationShapeError(), "# Guide"]

        with pytest.raises(GenerationShapeError):
            await pipeline.run("4 Lightning Bolt")
        result = await pipeline.run("4 Lightning Bolt")

        assert result.guide == "# Guide"
        assert pipeline.state == PipelineState.DONE


class TestGuidePipelineConcurrency:
    async def test_overlapping_run_is_rejected(
        self, pipeline: GuidePipeline, generator: MagicMock
    ) -> None:
        release = asyncio.Event()

        async def slow_generate(prompt: str) -> str:
            await release.wait()
            return "# Guide"

        generator.generate.side_effect = slow_generate

        first = asyncio.create_task(pipeline.run("4 Lightning Bolt"))
        while pipeline.state != PipelineState.GENERATING:
            await asyncio.sleep(0)

        assert pipeline.busy
        with pytest.raises(PipelineBusyError) as exc_info:
            await pipeline.run("4 Lightning Bolt")
        assert exc_info.value.status_code == 409

        release.set()
        result = await first

        assert result.guide == "# Guide"
        assert not pipeline.busy

    async def test_initial_state_is_idle(self, pipeline: GuidePipeline) -> None:
        assert pipeline.state == PipelineState.IDLE
        assert not pipeline.busy


class TestGuidePipelineCancellation:
    async def test_cancel_before_generation(
        self, pipeline: GuidePipeline, resolver: MagicMock, generator: MagicMock
    ) -> None:
        cancel = asyncio.Event()
        cards = resolver.resolve.return_value

        async def resolve_then_cancel(lines, cancel=None):
            cancel.set()
            return cards

        resolver.resolve.side_effect = resolve_then_cancel

        with pytest.raises(GuideCancelledError) as exc_info:
            await pipeline.run("4 Lightning Bolt", cancel=cancel)

        assert exc_info.value.phase == "guide generation"
        generator.generate.assert_not_awaited()

    async def test_cancel_during_generation_abandons_call(
        self, pipeline: GuidePipeline, generator: MagicMock
    ) -> None:
        cancel = asyncio.Event()
        started = asyncio.Event()
        abandoned = asyncio.Event()

        async def hanging_generate(prompt: str) -> str:
            started.set()
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                abandoned.set()
                raise
            return "unreachable"

        generator.generate.side_effect = hanging_generate

        run = asyncio.create_task(pipeline.run("4 Lightning Bolt", cancel=cancel))
        await started.wait()
        cancel.set()

        with pytest.raises(GuideCancelledError):
            await run

        await asyncio.wait_for(abandoned.wait(), timeout=1)
        assert pipeline.state == PipelineState.FAILED
        assert not pipeline.busy

    async def test_cancel_forwarded_to_resolver(
        self, pipeline: GuidePipeline, resolver: MagicMock
    ) -> None:
        cancel = asyncio.Event()

        await pipeline.run("4 Lightning Bolt", cancel=cancel)

        assert resolver.resolve.await_args.kwargs["cancel"] is cancel

"""
Guide API endpoints.

The web skin over the guide pipeline: submit a decklist, get back the
resolved cards and the generated strategy guide.
"""

import asyncio
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from deckguide.models.decklist import ResolvedCard
from deckguide.models.failure import ApiResponse, create_success
from deckguide.parsers.decklist import parse_decklist
from deckguide.services.guide_pipeline import DecklistInputError, GuidePipeline, PipelineState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/guides", tags=["guides"])

# Seconds between client-disconnect checks while a guide is generating
DISCONNECT_POLL_INTERVAL = 1.0

_pipeline: GuidePipeline | None = None


def get_pipeline() -> GuidePipeline:
    """Shared pipeline; one guide generates at a time across the service."""
    global _pipeline
    if _pipeline is None:
        _pipeline = GuidePipeline()
    return _pipeline


class GuideRequest(BaseModel):
    """Request body for guide generation."""

    decklist: str = Field(
        ...,
        description="Decklist text, one '<quantity> <card name>' per line",
        examples=["4 Goblin Guide\n4 Lightning Bolt\n18 Mountain"],
    )


class CardSummary(BaseModel):
    """Resolved card fields the presentation layer displays."""

    name: str
    quantity: int
    mana_cost: str | None = None
    type_line: str | None = None
    image_uri: str | None = None
    display_id: str


class GuideData(BaseModel):
    """Successful guide generation result."""

    guide: str
    cards: list[CardSummary] = Field(default_factory=list)


class ParsedLine(BaseModel):
    """One parsed decklist line."""

    quantity: int
    name: str
    display_id: str


class ParseData(BaseModel):
    """Parse preview result."""

    lines: list[ParsedLine] = Field(default_factory=list)
    count: int = 0


class PipelineStatus(BaseModel):
    """Current pipeline lifecycle state."""

    state: PipelineState
    busy: bool


def _summarize(card: ResolvedCard) -> CardSummary:
    return CardSummary(
        name=card.name,
        quantity=card.quantity,
        mana_cost=card.mana_cost,
        type_line=card.type_line,
        image_uri=card.image_uri,
        display_id=card.display_identity,
    )


async def _watch_disconnect(request: Request, cancel: asyncio.Event) -> None:
    """Set cancel once the client goes away."""
    while not cancel.is_set():
        if await request.is_disconnected():
            logger.info("Client disconnected, cancelling guide generation")
            cancel.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_INTERVAL)


@router.post("/", response_model=ApiResponse[GuideData])
async def generate_guide(
    body: GuideRequest,
    request: Request,
    pipeline: Annotated[GuidePipeline, Depends(get_pipeline)],
) -> ApiResponse[Any]:
    """
    Generate a strategy guide for a decklist.

    Resolves every card against Scryfall first. If any card cannot be
    found, no guide is generated and every unresolved line is reported.
    """
    cancel = asyncio.Event()
    watcher = asyncio.create_task(_watch_disconnect(request, cancel))
    try:
        result = await pipeline.run(body.decklist, cancel=cancel)
    finally:
        watcher.cancel()

    return create_success(
        GuideData(
            guide=result.guide,
            cards=[_summarize(card) for card in result.cards],
        )
    )


@router.post("/parse", response_model=ApiResponse[ParseData])
async def parse_guide_decklist(body: GuideRequest) -> ApiResponse[Any]:
    """
    Preview how a decklist will be read, without any network calls.

    Section headers and lines without a leading count are dropped.
    """
    lines = parse_decklist(body.decklist)
    if not lines:
        raise DecklistInputError()

    return create_success(
        ParseData(
            lines=[
                ParsedLine(quantity=line.quantity, name=line.name, display_id=line.identity)
                for line in lines
            ],
            count=len(lines),
        )
    )


@router.get("/status", response_model=PipelineStatus)
async def pipeline_status(
    pipeline: Annotated[GuidePipeline, Depends(get_pipeline)],
) -> PipelineStatus:
    """Report whether a guide is currently being generated."""
    return PipelineStatus(state=pipeline.state, busy=pipeline.busy)

"""
DeckGuide services.

Card resolution, prompt building, guide generation and the pipeline
that sequences them.
"""

from deckguide.services.card_resolver import (
    CardLookupError,
    CardResolver,
    ResolutionError,
    ResolutionResult,
)
from deckguide.services.guide_generator import (
    GenerationShapeError,
    GenerationTransportError,
    GeneratorNotConfiguredError,
    GuideGenerator,
    extract_guide_text,
)
from deckguide.services.guide_pipeline import (
    DecklistInputError,
    GuidePipeline,
    PipelineBusyError,
    PipelineState,
)
from deckguide.services.guide_prompt import (
    GUIDE_SECTIONS,
    EmptyDeckError,
    build_guide_prompt,
    format_card,
    format_decklist,
)

__all__ = [
    "GUIDE_SECTIONS",
    "CardLookupError",
    "CardResolver",
    "DecklistInputError",
    "EmptyDeckError",
    "GenerationShapeError",
    "GenerationTransportError",
    "GeneratorNotConfiguredError",
    "GuideGenerator",
    "GuidePipeline",
    "PipelineBusyError",
    "PipelineState",
    "ResolutionError",
    "ResolutionResult",
    "build_guide_prompt",
    "extract_guide_text",
    "format_card",
    "format_decklist",
]

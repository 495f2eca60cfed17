from deckguide.models.decklist import (
    DecklistLine,
    GuideResult,
    ResolutionFailure,
    ResolvedCard,
)
from deckguide.models.failure import (
    STANDARD_MESSAGES,
    STANDARD_SUGGESTIONS,
    ApiResponse,
    FailureDetail,
    FailureKind,
    GuideCancelledError,
    KnownError,
    OutcomeType,
    create_known_failure,
    create_success,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)

__all__ = [
    "ApiResponse",
    "DecklistLine",
    "FailureDetail",
    "FailureKind",
    "GuideCancelledError",
    "GuideResult",
    "KnownError",
    "OutcomeType",
    "ResolutionFailure",
    "ResolvedCard",
    "STANDARD_MESSAGES",
    "STANDARD_SUGGESTIONS",
    "create_known_failure",
    "create_success",
    "create_unknown_failure",
    "finalize_response",
    "is_finalized",
]

from deckguide.api.guides import router as guides_router
from deckguide.api.health import router as health_router

__all__ = [
    "guides_router",
    "health_router",
]

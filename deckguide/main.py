import logging
from importlib.metadata import version as pkg_version

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from deckguide.api import guides_router, health_router
from deckguide.config import settings
from deckguide.models.failure import KnownError, create_known_failure, create_unknown_failure

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    version=pkg_version("deckguide"),
    debug=settings.debug,
)

app.include_router(guides_router)
app.include_router(health_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    """Render known failures as the classified envelope with their status code."""
    logger.info("Known failure: %s", exc.kind.value, extra={"status_code": exc.status_code})
    response = create_known_failure(exc)
    return JSONResponse(status_code=exc.status_code, content=response.model_dump(mode="json"))


@app.exception_handler(Exception)
async def unknown_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Anything unclassified still leaves as an unknown_failure envelope."""
    logger.exception("Unhandled error")
    response = create_unknown_failure(exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=response.model_dump(mode="json"),
    )


if __name__ == "__main__":
    uvicorn.run(
        "deckguide.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level="debug" if settings.debug else "info",
    )

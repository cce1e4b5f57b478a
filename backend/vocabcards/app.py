"""
Vocabcards Backend - FastAPI Application

Adaptive flashcard quizzes for vocabulary study.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root (parent of backend/)
# Must happen before importing modules that use environment variables
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(env_path)

import uvicorn  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from vocabcards import __version__, config  # noqa: E402
from vocabcards.api.dependencies import cleanup_dependencies, init_dependencies  # noqa: E402
from vocabcards.api.routes import (  # noqa: E402
    cards_router,
    collection_router,
    session_router,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan manager for startup/shutdown events.

    Startup:
    - Initialize singleton dependencies
    - Mark sessions left open by a crash as abandoned

    Shutdown:
    - End the held session
    - Close the card store
    """
    logger.info("Starting vocabcards backend...")

    await init_dependencies()
    logger.info("Dependencies initialized")

    yield

    logger.info("Shutting down vocabcards backend...")
    await cleanup_dependencies()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Vocabcards API",
    description="Adaptive vocabulary flashcard quizzes",
    version=__version__,
    lifespan=lifespan,
)

# CORS configuration - loaded from environment with restrictive defaults
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get_cors_origins(),
    allow_credentials=config.get_cors_allow_credentials(),
    allow_methods=config.CORS_ALLOWED_METHODS,
    allow_headers=config.CORS_ALLOWED_HEADERS,
)

# Register API routers
app.include_router(session_router)
app.include_router(cards_router)
app.include_router(collection_router)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "vocabcards-backend",
        "version": __version__,
    }


def main() -> None:
    """Run the API server (console entry point)."""
    logging.basicConfig(level=config.get_log_level())
    uvicorn.run(app, host=config.get_host(), port=config.get_port())


if __name__ == "__main__":
    main()

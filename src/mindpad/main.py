"""
Mindpad Backend Application

FastAPI application entrypoint with async lifespan management.
Handles storage startup checks, service wiring and graceful shutdown.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from mindpad.api.v1.capture import router as capture_router
from mindpad.api.v1.notes import router as notes_router
from mindpad.core.config import settings
from mindpad.core.database import build_engine, build_session_factory, init_db
from mindpad.core.logging import setup_logging
from mindpad.services.ai import EmbeddingGateway
from mindpad.services.container import Services, build_services
from mindpad.services.llm import LLMService

# Initialize logging before any log statements
setup_logging()
logger = logging.getLogger(__name__)


async def check_storage(engine: AsyncEngine) -> bool:
    """
    Create the schema and verify the SQLite file is usable.

    Returns:
        True if the store answered, False on any database error.
    """
    try:
        await init_db(engine)
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Note store ready (%s)", settings.DATABASE_PATH)
        return True
    except Exception as e:
        logger.error("Note store unavailable: %s", e)
        return False


def create_app(
    database_url: str | None = None,
    embeddings: EmbeddingGateway | None = None,
    llm: LLMService | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        database_url: SQLite URL override (defaults to settings.DATABASE_URL).
        embeddings: Embedding gateway override.
        llm: Title/tag generator override.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup:
            - Validates storage (required, blocks startup on failure)
            - Reports whether enrichment is configured (optional)

        Shutdown:
            - Cancels in-flight enrichment, disposes the engine
        """
        logger.info("Starting %s...", settings.PROJECT_NAME)
        logger.info("Log Level: %s", settings.LOG_LEVEL)

        engine = build_engine(database_url)
        if not await check_storage(engine):
            logger.critical("Could not open the note store. Shutting down.")
            await engine.dispose()
            raise RuntimeError("Note store initialization failed")

        services = build_services(
            build_session_factory(engine), embeddings=embeddings, llm=llm
        )
        app.state.services = services
        if not services.enrichment_configured:
            logger.warning("OPENAI_API_KEY not set - notes will be saved without enrichment")

        yield  # Application runs here

        logger.info("Shutting down %s...", settings.PROJECT_NAME)
        await services.aclose()
        await engine.dispose()

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.include_router(notes_router, prefix="/api/v1/notes", tags=["Notes"])
    app.include_router(capture_router, prefix="/api/v1/capture", tags=["Quick Capture"])

    @app.get("/health")
    async def health_check(request: Request):
        """Liveness plus enrichment mode and store diagnostics."""
        current: Services = request.app.state.services
        return {
            "status": "ok",
            "service": "mindpad",
            "enrichment": (
                "configured" if current.enrichment_configured else "not-configured"
            ),
            "enrichment_in_flight": current.pipeline.in_flight,
            "corrupt_records": current.store.corrupt_record_count,
            "capture": current.capture.state.value,
        }

    return app


app = create_app()


def run() -> None:
    """Console entrypoint: serve the API on the loopback interface."""
    uvicorn.run("mindpad.main:app", host=settings.HOST, port=settings.PORT)

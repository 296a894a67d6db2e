"""
FastAPI application factory with: \n
- Lifespan-managed construction and teardown of the database and the generation client \n
- CORS configured for the chat widget / admin frontend \n
- Exception handlers mapping pipeline and database errors to JSON responses \n

Collaborators passed to `create_app` are used as-is (tests pass a SQLite
`Database` and a fake chat model); anything missing is built from `Settings`
when the app starts and released when it stops.

Run with ``uvicorn tyrebot.main:create_app --factory`` or the ``tyrebot`` console script.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from tyrebot.api.fast_api import router
from tyrebot.database.config.config import Settings, get_settings
from tyrebot.database.config.connection_engine import Database
from tyrebot.database.core.admin_store import AdminStore
from tyrebot.database.core.analytics import AnalyticsAggregator
from tyrebot.database.core.conversation_store import ConversationStore
from tyrebot.database.core.knowledge_store import KnowledgeStore
from tyrebot.pipeline.errors import InputError, PersistenceError, ServiceError
from tyrebot.pipeline.generation import ChatModelGenerationService, GenerationService
from tyrebot.pipeline.matcher import QueryMatcher
from tyrebot.pipeline.orchestrator import DialogueOrchestrator

logger = logging.getLogger(__name__)


def attach_collaborators(app: FastAPI, settings: Settings, database: Database, generation_service: GenerationService) -> None:
    """Build the stores and the orchestrator on top of a database and a generation service."""
    knowledge_store = KnowledgeStore(database)
    conversation_store = ConversationStore(database)
    app.state.database = database
    app.state.knowledge_store = knowledge_store
    app.state.conversation_store = conversation_store
    app.state.analytics = AnalyticsAggregator(database)
    app.state.admin_store = AdminStore(database)
    app.state.orchestrator = DialogueOrchestrator(
        matcher=QueryMatcher(knowledge_store),
        generation_service=generation_service,
        conversation_store=conversation_store,
        max_tokens=settings.GENERATION_MAX_TOKENS,
    )


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    generation_service: GenerationService | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Parameters
    ----------
    settings : Settings | None
        Defaults to `get_settings()`.
    database : Database | None
        Injected database; when omitted one is built from settings at startup
        (tables are created if missing) and disposed at shutdown.
    generation_service : GenerationService | None
        Injected generation client; defaults to `ChatModelGenerationService.from_settings`.
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned_database = None
        if app.state.orchestrator is None:
            active_database = database
            if active_database is None:
                owned_database = active_database = Database.from_settings(settings)
                owned_database.create_all()
            attach_collaborators(
                app,
                settings,
                active_database,
                generation_service or ChatModelGenerationService.from_settings(settings),
            )
            logger.info("Collaborators initialised (environment=%s)", settings.ENVIRONMENT)
        try:
            yield
        finally:
            if owned_database is not None:
                owned_database.dispose()
            logger.info("Application shut down")

    app = FastAPI(title="Tyre support assistant", lifespan=lifespan)
    app.state.settings = settings
    app.state.orchestrator = None

    if database is not None and generation_service is not None:
        attach_collaborators(app, settings, database, generation_service)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InputError)
    async def input_error_handler(request: Request, exc: InputError):
        return JSONResponse(status_code=400, content={"error": exc.user_message})

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.detail)
        content = {"error": ServiceError.user_message}
        if not settings.is_production:
            content["details"] = exc.detail
        return JSONResponse(status_code=500, content=content)

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        return await service_error_handler(request, PersistenceError(f"Database operation failed: {exc}"))

    app.include_router(router)
    return app


def run() -> None:
    """Console entry point."""
    uvicorn.run(create_app, factory=True, host="0.0.0.0", port=3001)

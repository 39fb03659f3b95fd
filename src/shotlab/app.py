"""shotlab HTTP service: lifespan wiring and router registration."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from shotlab.api.routes import batches, credentials, estimate, history, stats
from shotlab.core.config import Settings, configure_logging
from shotlab.core.database import create_engine, init_db, setup_db_session
from shotlab.services.credentials import CredentialMonitor
from shotlab.services.exceptions import ConfigurationError
from shotlab.services.generation.dispatcher import GenerationDispatcher
from shotlab.services.generation.gemini_client import GeminiBackend
from shotlab.services.reconciler import BatchReconciler
from shotlab.uow import create_uow_factory
from shotlab.workers.batch_worker import BatchRunner, recover_interrupted_entries

logger = structlog.get_logger()


def build_runner(app: FastAPI, settings: Settings, uow_factory) -> BatchRunner | None:
    """Wire backend → dispatcher → reconciler, or None when no key is configured."""
    try:
        backend = GeminiBackend(settings)
    except ConfigurationError as e:
        logger.error("startup.backend_unavailable", error=str(e))
        return None

    return BatchRunner(
        uow_factory=uow_factory,
        dispatcher=GenerationDispatcher(backend, settings),
        reconciler=BatchReconciler(),
        credentials=app.state.credentials,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store, recover interrupted entries and start the batch runner.

    On shutdown running batches are cancelled (their entries are failed by the
    next startup's recovery) and the engine is disposed.
    """
    settings = Settings()  # type: ignore[call-arg]
    configure_logging(settings)

    engine = create_engine(settings.database_url)
    await init_db(engine)

    app.state.session_factory = setup_db_session(engine)
    app.state.uow_factory = create_uow_factory(app.state.session_factory)

    await recover_interrupted_entries(app.state.uow_factory)

    runner = build_runner(app, settings, app.state.uow_factory)
    app.state.batch_runner = runner
    logger.info(
        "application.startup",
        database=settings.database_url.split("@")[-1],
        backend_ready=runner is not None,
    )

    yield

    logger.info("application.shutdown", active_batches=runner.active_batches if runner else 0)
    if runner is not None:
        await runner.shutdown()
    await engine.dispose()


async def health_check(request: Request, response: Response) -> dict:
    """Report 200 when the store answers a trivial query, 503 otherwise."""
    try:
        async with request.app.state.session_factory() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("health_check.failed", error=str(e), error_type=type(e).__name__)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "unhealthy", "error": {"type": type(e).__name__, "message": str(e)}}

    logger.debug("health_check.success")
    return {"status": "healthy"}


def create_app() -> FastAPI:
    settings = Settings()  # type: ignore[call-arg]

    app = FastAPI(
        title="Shotlab API",
        description="Batch product photo and video generation",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.credentials = CredentialMonitor()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for module in (estimate, batches, history, stats, credentials):
        app.include_router(module.router)
    app.add_api_route("/health", health_check, methods=["GET"])

    return app


app = create_app()

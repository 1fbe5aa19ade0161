import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from routes.feedback_route import router as feedback_router
from routes.realtime_ws import router as realtime_router
from routes.session_route import router as session_router
from routes.tag_route import router as tag_router
from services.realtime.connection_manager import ConnectionLifecycleManager
from services.realtime.event_router import EventRouter
from services.realtime.session_registry import SessionRegistry
from services.realtime.transport import WebSocketTransport
from services.realtime.ws_session import RealtimeSessionHandler
from utils.database_init import AsyncDatabaseInitializer
from utils.settings import Settings, load_settings

load_dotenv()  # Load environment variables from .env file if present

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the SQLite database at DATABASE_DIR/app.db
      - the realtime core: one session registry, transport, lifecycle
        manager and event router per process
    and attach them to `app.state`.
    """
    settings: Settings = app.state.settings

    db_initializer = AsyncDatabaseInitializer(settings.database_dir, reset=settings.database_reset)
    await db_initializer.ensure_database()
    app.state.db_initializer = db_initializer

    registry = SessionRegistry()
    transport = WebSocketTransport()
    manager = ConnectionLifecycleManager(registry, transport)
    event_router = EventRouter(manager, registry, transport)

    app.state.session_registry = registry
    app.state.transport = transport
    app.state.connection_manager = manager
    app.state.event_router = event_router
    app.state.session_handler = RealtimeSessionHandler(manager, event_router)
    logger.info("Feedback service ready (database at %s)", db_initializer.db_path)

    yield

    logger.info("Shutting down with %d open connections", manager.connection_count())


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    settings = settings or load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Viewpoint Feedback", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["*"],
    )

    @app.get("/", include_in_schema=False)
    async def index():
        return RedirectResponse(url="/docs")

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check reporting database and realtime state.
        """
        db_initializer = getattr(request.app.state, "db_initializer", None)
        transport = getattr(request.app.state, "transport", None)
        registry = getattr(request.app.state, "session_registry", None)
        return {
            "ok": True,
            "db_initialized": bool(db_initializer and db_initializer.initialized),
            "connections": transport.connection_count() if transport else 0,
            "sessions": len(registry) if registry is not None else 0,
        }

    # Register application routers
    app.include_router(tag_router)
    app.include_router(feedback_router)
    app.include_router(session_router)
    app.include_router(realtime_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, log_level="info")

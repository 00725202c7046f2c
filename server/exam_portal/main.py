import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from exam_portal.config import Settings, settings as default_settings
from exam_portal.database import SessionLocal, init_db
from exam_portal.routes import auth, exam, realtime, submission, teacher
from exam_portal.services.alert_pipeline import AlertPipeline
from exam_portal.services.alert_store import AlertStore
from exam_portal.services.connection_manager import ConnectionManager
from exam_portal.services.connection_registry import ConnectionRegistry
from exam_portal.services.dashboard import DashboardAggregator
from exam_portal.services.exam_repository import ExamRepository
from exam_portal.timeutils import iso_utc, utcnow

logger = logging.getLogger(__name__)


def create_app(
    session_factory: Optional[sessionmaker] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the application. The registry, stores and pipeline live on
    `app.state` for exactly as long as the app does.
    """
    settings = settings or default_settings
    session_factory = session_factory or SessionLocal

    app = FastAPI(
        title=settings.app_name,
        version=settings.api_version,
        debug=settings.debug
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    registry = ConnectionRegistry()
    connections = ConnectionManager()
    store = AlertStore(session_factory)
    exams = ExamRepository(session_factory)

    app.state.session_factory = session_factory
    app.state.registry = registry
    app.state.connections = connections
    app.state.alert_store = store
    app.state.exams = exams
    app.state.pipeline = AlertPipeline(
        registry,
        store,
        connections,
        queue_without_teachers=settings.queue_alerts_without_teachers,
        pending_limit=settings.pending_alerts_limit,
    )
    app.state.dashboard = DashboardAggregator(
        store,
        exams,
        recent_limit=settings.recent_alerts_limit,
        timezone_name=settings.dashboard_timezone,
    )

    @app.on_event("startup")
    async def startup_event():
        """Create tables; failing to reach the database here is fatal."""
        init_db(bind=session_factory.kw.get("bind"))
        logger.info(f"🚀 {settings.app_name} is starting...")
        logger.info(f"📚 Database: {settings.database_url}")

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.pipeline.drain()

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.api_version,
            "status": "running"
        }

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint"""
        try:
            with session_factory() as session:
                session.execute(text("SELECT 1"))
            database = "Connected"
        except SQLAlchemyError:
            database = "Unavailable"
        return {"status": "OK", "database": database, "timestamp": iso_utc(utcnow())}

    app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(exam.router, prefix="/api/exams", tags=["Exam"])
    app.include_router(submission.router, prefix="/api/submissions", tags=["Submission"])
    app.include_router(teacher.router, prefix="/api/teacher", tags=["Teacher"])
    app.include_router(realtime.router)

    return app


logging.basicConfig(
    level=default_settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()


def run():
    import uvicorn

    uvicorn.run(app, host=default_settings.host, port=default_settings.port)

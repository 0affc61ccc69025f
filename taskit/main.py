import logging
import time
from typing import Optional
from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .core.auth import AuthGate
from .core.config import Settings, get_settings
from .core.database import check_db_connection, get_db, init_db
from .core.errors import TaskItError
from .core.jwt_handler import JWTHandler
from .mail.notifications import Notifier, build_notifier
from .routers import tasks, users
from .schemas.base import field_errors
from .services.avatars import AvatarProcessor

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, notifier: Optional[Notifier] = None) -> FastAPI:
    """Build the Task-It application with its collaborators attached to ``app.state``"""
    settings = settings or get_settings()

    app = FastAPI(
        title="Task-It",
        description="Task management with per-account sessions",
        version=settings.service_version
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    jwt_handler = JWTHandler.from_settings(settings)
    app.state.settings = settings
    app.state.jwt_handler = jwt_handler
    app.state.auth_gate = AuthGate(jwt_handler)
    app.state.notifier = notifier or build_notifier(settings)
    app.state.avatars = AvatarProcessor(settings.avatar_size, settings.avatar_max_bytes)

    app.include_router(users.router, prefix="/users", tags=["users"])
    app.include_router(tasks.router, prefix="/tasks", tags=["tasks"])

    @app.exception_handler(TaskItError)
    async def handle_taskit_error(request: Request, exc: TaskItError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Validation failed", "fields": field_errors(exc)},
        )

    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(request: Request, exc: SQLAlchemyError):
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    @app.on_event("startup")
    async def startup_event():
        """Initialize database on startup"""
        logger.info("Starting Task-It...")
        init_db()
        logger.info("Task-It startup completed")

    @app.on_event("shutdown")
    async def shutdown_event():
        app.state.notifier.close()

    @app.get("/health")
    def health_check(db: Session = Depends(get_db)):
        db_healthy = check_db_connection(db)
        return {
            "service": settings.service_name,
            "version": settings.service_version,
            "status": "healthy" if db_healthy else "unhealthy",
            "database": "connected" if db_healthy else "disconnected",
            "timestamp": time.time()
        }

    return app


logging.basicConfig(level=get_settings().log_level)

app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("taskit.main:app", host="0.0.0.0", port=8000, reload=True)

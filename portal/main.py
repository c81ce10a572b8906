"""MMPS Connect - FastAPI entrypoint."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import ServerSelectionTimeoutError

from portal.api import announcements, attendance, auth, dashboard, events, exams, results, students, teachers, transport
from portal.config import settings
from portal.db import db_shutdown, db_startup
from portal.errors import InvalidCredentialsError, TransportError, ValidationError
from portal.remote.base import RemoteClient
from portal.seed import seed_admin
from portal.storage import LocalStorage
from portal.store import Store

logger = logging.getLogger(__name__)

TRANSPORT_STATUS = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
    "email_exists": status.HTTP_409_CONFLICT,
}


def create_app(remote: Optional[RemoteClient] = None, storage: Optional[LocalStorage] = None) -> FastAPI:
    """Build the app; pass `remote` to run against an already wired client instead of MongoDB."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = remote
        if client is None:
            try:
                client = await db_startup()
                await seed_admin(client)
            except ServerSelectionTimeoutError as e:
                logger.error("MongoDB is not running. Start it or point MONGODB_URL at a reachable server")
                raise RuntimeError("MongoDB connection failed.") from e
        store = Store(storage if storage is not None else LocalStorage(settings.local_storage_path))
        app.state.remote = client
        app.state.store = store
        store.restore_user()
        store.bind_auth(client)
        await store.initialize(client)
        yield
        store.unbind_auth()
        if remote is None:
            await db_shutdown()

    app = FastAPI(
        title=settings.app_name,
        description="School portal: students, staff, notices, transport, exams and results",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.exception_handler(ValidationError)
    async def portal_validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": exc.message})

    @app.exception_handler(InvalidCredentialsError)
    async def invalid_credentials_handler(request: Request, exc: InvalidCredentialsError):
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"detail": exc.message})

    @app.exception_handler(TransportError)
    async def transport_error_handler(request: Request, exc: TransportError):
        code = TRANSPORT_STATUS.get(exc.code, status.HTTP_502_BAD_GATEWAY)
        if code == status.HTTP_502_BAD_GATEWAY:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=code, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.errors()},
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # API routes
    app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(students.router, prefix="/api/students", tags=["Students"])
    app.include_router(teachers.router, prefix="/api/teachers", tags=["Teachers"])
    app.include_router(announcements.router, prefix="/api/announcements", tags=["Announcements"])
    app.include_router(events.router, prefix="/api/events", tags=["Events"])
    app.include_router(transport.router, prefix="/api/transport", tags=["Transport"])
    app.include_router(exams.router, prefix="/api/exams", tags=["Exams"])
    app.include_router(attendance.router, prefix="/api/attendance", tags=["Attendance"])
    app.include_router(results.router, prefix="/api/results", tags=["Results"])
    app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])

    @app.get("/health")
    def health():
        return {"status": "ok", "app": settings.app_name}

    return app


app = create_app()

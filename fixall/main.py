import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fixall.core.config import Settings
from fixall.core.lifecycle import TransitionError
from fixall.core.security import build_password_context
from fixall.db.base import Base, build_engine, build_session_factory
from fixall.db.models import booking, review, user  # noqa: F401 - register tables
from fixall.api.routes import auth
from fixall.api.routes import admin as admin_router
from fixall.api.routes import customer as customer_router
from fixall.api.routes import technician as technician_router
from fixall.api.routes import profile as profile_router

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        msg = error.get("msg", "Invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    engine = build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("FixAll API starting up...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables ready")
        yield
        engine.dispose()
        logger.info("FixAll API shut down")

    app = FastAPI(title="FixAll API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.pwd_context = build_password_context(settings.bcrypt_rounds)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
            raise
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
        return response

    @app.exception_handler(TransitionError)
    async def transition_error_handler(request: Request, exc: TransitionError):
        logger.info(f"Rejected transition on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=400, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        detail = _format_validation_errors(exc)
        logger.warning(f"Validation error for {request.url.path}: {detail}")
        return JSONResponse(status_code=400, content={"detail": detail})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/api/health")
    def health():
        return {
            "status": "OK",
            "message": "FixAll Backend Server is running",
            "timestamp": datetime.utcnow().isoformat(),
        }

    app.include_router(auth.router, prefix="/api/auth")
    app.include_router(admin_router.router, prefix="/api/admin")
    app.include_router(customer_router.router, prefix="/api/customer")
    app.include_router(technician_router.router, prefix="/api/technician")
    app.include_router(profile_router.router, prefix="/api/profile")

    return app

import os
import logging
import traceback
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

from modular_house.core.config import Settings, load_settings
from modular_house.core.db import build_engine, build_session_factory, init_db
from modular_house.core.errors import DomainError
from modular_house.middleware.api_logger import APILoggerMiddleware
from modular_house.middleware.security_headers import SecurityHeadersMiddleware
from modular_house.middleware.rate_limit import (
    RateLimitExceeded,
    general_rate_limiter,
    submission_rate_limiter,
)
from modular_house.middleware.validation import request_validation_handler
from modular_house.services.auth import AuthService
from modular_house.services.mailer import Mailer
from modular_house.services.notifications import SubmissionNotifier

# === Routers ===
from modular_house.routes import health, submissions
from modular_house.routes.admin import auth, pages, gallery, faqs, redirects, uploads
from modular_house.routes.admin import submissions as admin_submissions

logger = logging.getLogger(__name__)

STATUS_ERRORS = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not found",
    405: "Method Not Allowed",
    409: "Conflict",
}


# === Exception Handlers ===
async def domain_error_handler(request: Request, exc: DomainError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.error, "message": exc.message})


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content=exc.to_dict(),
        headers={"Retry-After": str(exc.retry_after_seconds)},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"error": STATUS_ERRORS.get(exc.status_code, "Error"), "message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception):
    request_id = getattr(request.state, "request_id", None)
    logger.exception(f"❌ Unhandled error [{request_id}] {request.method} {request.url.path}")

    content = {
        "error": "Internal Server Error",
        "message": "An unexpected error occurred",
        "requestId": request_id,
    }
    if request.app.state.settings.app.is_development:
        content["message"] = str(exc)
        content["stack"] = traceback.format_exc()
    return JSONResponse(status_code=500, content=content)


# === App Factory ===
def create_app(settings: Optional[Settings] = None,
               mailer: Optional[Mailer] = None,
               session_factory: Optional[sessionmaker] = None) -> FastAPI:
    settings = settings or load_settings()

    logging.basicConfig(level=getattr(logging, settings.app.log_level, logging.INFO))

    if session_factory is None:
        engine = build_engine(settings.database_url)
        init_db(engine)
        session_factory = build_session_factory(engine)

    mailer = mailer or Mailer(settings.mail)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"✅ Startup complete: env={settings.app.env}")
        try:
            yield
        finally:
            mailer.close()
            logger.info("🛑 Shutdown complete.")

    app = FastAPI(title="Modular House API", version="1.0.0", lifespan=lifespan)

    exempt = settings.security.rate_limit_exempt_unknown_ip
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.mailer = mailer
    app.state.auth_service = AuthService(settings.security)
    app.state.notifier = SubmissionNotifier(session_factory, mailer, settings)
    app.state.submission_limiter = submission_rate_limiter(exempt_unknown_ip=exempt)
    app.state.general_limiter = general_rate_limiter(exempt_unknown_ip=exempt)

    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # === Middleware ===
    app.add_middleware(APILoggerMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.app.is_production)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # === Mount Routes ===
    app.include_router(health.router)
    app.include_router(submissions.router)
    app.include_router(auth.router)
    app.include_router(pages.router)
    app.include_router(gallery.router)
    app.include_router(faqs.router)
    app.include_router(redirects.router)
    app.include_router(admin_submissions.router)
    app.include_router(uploads.router)

    os.makedirs(settings.app.upload_dir, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.app.upload_dir), name="uploads")

    return app


# === Dev Server ===
if __name__ == "__main__":
    import uvicorn

    settings = load_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.app.port)

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import os
import time
from typing import Optional
from dotenv import load_dotenv

from src.models.database import Base, SessionLocal, engine
from src.services.identity_store import IdentityStore, SqlAlchemyIdentityStore
from src.utils.exceptions import DuplicateKeyError, RegistrantNotFoundError, ValidationError
from .routes import admin, registrations

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

def _error(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)

def register_error_handlers(app: FastAPI) -> None:
    """Every error leaves the API as {"error": message}"""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return _error(400, str(exc))

    @app.exception_handler(DuplicateKeyError)
    async def duplicate_error_handler(request: Request, exc: DuplicateKeyError):
        return _error(400, str(exc))

    @app.exception_handler(RegistrantNotFoundError)
    async def not_found_handler(request: Request, exc: RegistrantNotFoundError):
        return _error(404, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return _error(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and request.url.path.startswith("/api/") and exc.detail == "Not Found":
            return _error(404, "API endpoint not found")
        return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error(500, "Internal server error")

def create_app(store: Optional[IdentityStore] = None) -> FastAPI:
    """Build the API around `store`; defaults to the SQL table behind DATABASE_URL"""
    if store is None:
        # Create database tables
        Base.metadata.create_all(bind=engine)
        store = SqlAlchemyIdentityStore(SessionLocal)

    app = FastAPI(title="Campus Waitlist", version="1.0.0", docs_url="/api/docs")
    app.state.store = store
    app.state.started_at = time.monotonic()

    # Add CORS middleware
    origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Include routers
    app.include_router(registrations.router, prefix="/api")
    app.include_router(admin.router, prefix="/api")

    @app.get("/")
    async def root():
        return {
            "message": "Campus Waitlist API",
            "endpoints": {
                "register": "/api/register",
                "queue": "/api/queue/{email}",
                "admin": "/api/admin",
                "api_docs": "/api/docs",
                "health": "/api/health"
            }
        }

    return app

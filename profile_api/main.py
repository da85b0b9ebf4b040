"""FastAPI application entry point."""
import threading
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from profile_api.config import settings
from profile_api.database import init_db
from profile_api.logging_config import setup_logging, get_logger
from profile_api.middleware.logging_middleware import LoggingMiddleware
from profile_api.routes import auth, debug, health, profile

logger = get_logger("profile_api.main")

# Malformed bodies on these routes fail like any other bad credential or update.
_BODY_VALIDATION_FAILURES = {
    "/auth/google": (401, "Invalid Google token"),
    "/profile": (400, "Profile update failed"),
}


def _run_startup() -> None:
    """Create or migrate the users table in the background."""
    try:
        init_db()
        logger.info("Database initialized")
    except Exception as e:
        # The store tolerates partial schemas, so the API keeps serving.
        logger.exception("Database initialization failed: %s", e)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    failure = _BODY_VALIDATION_FAILURES.get(request.url.path)
    if failure is None:
        return await request_validation_exception_handler(request, exc)
    status_code, detail = failure
    logger.info("Rejected %s body: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=status_code, content={"detail": detail})


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Starting %s (%s)", settings.app_name, settings.environment)
    if not settings.google_client_id:
        logger.warning("GOOGLE_CLIENT_ID is empty; Google sign-in will reject every token")
    thread = threading.Thread(target=_run_startup, daemon=True)
    thread.start()
    yield
    logger.info("Shutting down")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.add_middleware(LoggingMiddleware)
    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(profile.router)
    app.include_router(debug.router)

    @app.get("/")
    def root():
        """Root endpoint."""
        return {"message": settings.app_name, "docs": "/docs"}

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the API with uvicorn on settings.port."""
    import uvicorn

    uvicorn.run("profile_api.main:app", host="0.0.0.0", port=settings.port)

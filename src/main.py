import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from src.config.logging import configure_logging
from src.config.settings import Settings, settings
from src.database.client import close_db, create_tables, init_db
from src.database.errors import PersistenceError
from src.features.auth.jwt_utils import AccessTokenCodec
from src.features.auth.middleware import RequestAuthenticator
from src.features.auth.router import router as auth_router
from src.features.hello.router import router as hello_router
from src.features.user.router import router as user_router

logger = logging.getLogger(__name__)


async def rate_limit_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle rate limit exceeded errors."""
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"detail": "Rate limit exceeded"},
    )


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report malformed request bodies as 400 Bad Request."""
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(errors)},
    )


async def persistence_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map store failures that escaped the services to 500."""
    logger.error(f"Unhandled store failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    # Startup
    config: Settings = app.state.settings
    configure_logging(config.log_level)
    await init_db(config)
    await create_tables()
    yield
    # Shutdown
    await close_db()


def create_app(config: Settings = settings) -> FastAPI:
    """Build the application and wire its components from settings."""
    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        debug=config.debug,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.settings = config
    app.state.token_codec = AccessTokenCodec.from_settings(config)

    # Bearer authentication for everything under the API prefix
    app.add_middleware(
        RequestAuthenticator,
        codec=app.state.token_codec,
        protected_prefix=config.api_prefix,
    )

    # Rate limiting wraps authentication, so rejected requests still count
    app.state.limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[config.rate_limit_default],
        enabled=config.rate_limit_enabled,
    )
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(PersistenceError, persistence_error_handler)

    # Router Registration

    # Public routers - no bearer token required
    public_routers: list[APIRouter] = [
        auth_router,
        user_router,
    ]

    # Protected routers - mounted under the API prefix guarded by RequestAuthenticator
    protected_routers: list[APIRouter] = [
        hello_router,
    ]

    for router in public_routers:
        app.include_router(router)

    for router in protected_routers:
        app.include_router(router, prefix=config.api_prefix)

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "Hello, World!"

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


app = create_app()

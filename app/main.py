import logging
from contextlib import asynccontextmanager

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    force=True
)

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from app.config import get_settings
from app.database import StoreError
from app.routers.auth import auth_router
from app.routers.users import users_router
from app.rate_limiter import rate_limit_middleware, load_rate_limit_script
from app.dependencies import auth_middleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Fail fast on a missing signing secret, then load the rate limit script."""
    get_settings()
    await load_rate_limit_script()
    yield


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error(
        f"Store error on {request.method} {request.url.path}: "
        f"status={exc.status_code} message={exc.message}"
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "Upstream data store unavailable."},
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unexpected error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Unexpected error."},
    )


app = FastAPI(title="Heartbeat API", version="1.0.0", lifespan=lifespan)

# Last added runs first: auth sets request.state.user_id before the limiter reads it
app.add_middleware(BaseHTTPMiddleware, dispatch=rate_limit_middleware)
app.add_middleware(BaseHTTPMiddleware, dispatch=auth_middleware)

app.add_exception_handler(StoreError, store_error_handler)
app.add_exception_handler(Exception, unexpected_error_handler)

app.include_router(auth_router)
app.include_router(users_router)


@app.get("/", response_model=dict, status_code=status.HTTP_200_OK)
def root() -> dict:
    return {"message": "Heartbeat API is running", "docs": "/docs"}


@app.get("/health", response_model=dict, status_code=status.HTTP_200_OK)
def health_check() -> dict:
    return {"status": "healthy"}

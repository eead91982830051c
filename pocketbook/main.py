import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api import api_router
from .config import get_settings
from .db import init_db
from .scheduler import shutdown_scheduler, start_scheduler
from .services.errors import InternalError, LedgerError
from .telegram.bot import init_bot, shutdown_bot

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    start_scheduler()
    await init_bot()
    try:
        yield
    finally:
        await shutdown_bot()
        shutdown_scheduler()


settings = get_settings()
_docs_enabled = settings.environment.lower() != "production"
app = FastAPI(
    title=settings.app_name,
    lifespan=lifespan,
    docs_url="/docs" if _docs_enabled else None,
    redoc_url="/redoc" if _docs_enabled else None,
)
app.include_router(api_router, prefix="/api")


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error("Internal ledger error on %s %s: %s", request.method, request.url.path, exc)
        message = "Internal server error."
    else:
        message = exc.message
    body: dict = {"error": {"code": exc.code, "message": message}}
    if exc.retryable:
        body["error"]["retryable"] = True
    return JSONResponse(status_code=exc.status_code, content=body)


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}

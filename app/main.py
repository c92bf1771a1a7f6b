from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
import structlog

from app.shared.core.config import get_settings
from app.shared.core.exceptions import SpendLedgerException
from app.shared.core.health import HealthService
from app.shared.core.logging import setup_logging
from app.shared.core.middleware import RequestIDMiddleware
from app.shared.db.session import Database
from app.modules.identity.api.v1.auth import router as auth_router
from app.modules.ingestion.api.v1.upload import router as upload_router
from app.modules.reporting.api.v1.spend import router as spend_router
from app.modules.savings.api.v1.savings import router as savings_router
from app.modules.savings.api.v1.pr_helper import router as pr_helper_router

# Configure logging
setup_logging()

logger = structlog.get_logger()


# Runs BEFORE the app starts (setup) and AFTER it stops (teardown).
@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("app_starting", app=settings.APP_NAME, version=settings.VERSION)

    db = Database.from_settings(settings)
    await db.create_all()
    app.state.db = db

    yield

    logger.info("app_shutting_down", app=settings.APP_NAME)
    await db.dispose()


settings = get_settings()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    lifespan=lifespan,
)

# Prometheus metrics at /metrics
if not settings.TESTING:
    Instrumentator().instrument(app).expose(app)

app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SpendLedgerException)
async def spend_ledger_exception_handler(request: Request, exc: SpendLedgerException):
    """Renders the typed hierarchy as {"error": message}; 5xx never carries detail."""
    if exc.status_code >= 500:
        logger.error("request_failed",
                     path=request.url.path,
                     code=exc.code,
                     error=exc.message,
                     cause=repr(exc.__cause__) if exc.__cause__ else None)
    else:
        logger.info("request_rejected", path=request.url.path, code=exc.code, status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


app.include_router(auth_router, prefix="/api")
app.include_router(upload_router, prefix="/api")
app.include_router(spend_router, prefix="/api")
app.include_router(savings_router, prefix="/api")
app.include_router(pr_helper_router, prefix="/api")


@app.get("/health")
async def health_check(request: Request):
    result = await HealthService(request.app.state.db).check_all()
    status_code = 200 if result["status"] == "healthy" else 503
    return JSONResponse(status_code=status_code, content=result)

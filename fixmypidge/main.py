"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from fixmypidge.core.config import settings
from fixmypidge.core.exceptions import AppError
from fixmypidge.core.structured_logging import configure_logging
from fixmypidge.db.session import engine

configure_logging(settings.ENV)
logger = logging.getLogger(__name__)

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,  # 10% of requests for performance monitoring
        send_default_pii=False,  # Don't send PII to Sentry
    )
    logging.info("Sentry initialized for error tracking")

# ============================================================================
# Rate Limiting
# ============================================================================

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from fixmypidge.core.rate_limit import limiter
from fixmypidge.services import automation_outbound_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Let fire-and-forget automation deliveries finish before the loop closes
    await automation_outbound_service.drain_pending(timeout=5.0)


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="FixMyPidge API",
    description="Injured bird reports, expert conversations and automation webhooks",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
    lifespan=lifespan,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware - must be added before routers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(AppError)
async def handle_app_error(request: Request, exc: AppError):
    """Render domain errors as {"detail": ...} with their status code."""
    if exc.status_code >= 500:
        logger.error("Request failed: %s %s", request.method, request.url.path)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# ============================================================================
# Routers
# ============================================================================

from fixmypidge.routers import auth_router, cases_router, media_router, webhooks_router

app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(cases_router, prefix="/cases", tags=["cases"])

# Local photo backend (PUBLIC_STORAGE_BASE_URL points here)
app.include_router(media_router, prefix="/media", tags=["media"])

# Automation pipeline (protected by WEBHOOK_SECRET)
app.include_router(webhooks_router, prefix="/webhooks", tags=["webhooks"])


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    """
    Health check endpoint.

    Verifies database connectivity and returns environment info.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}

"""
PropSmart API
Maintenance dispatch, utility billing, payments and the dashboard push channel.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import logging
import time
import traceback

from app.api.routes import (
    auth_router,
    staff_router,
    properties_router,
    alerts_router,
    maintenance_router,
    invoices_router,
    payments_router,
    reminders_router,
)
from app.api.websocket import router as websocket_router
from app.core.config import settings
from app.core.security import get_password_hash
from app.database import SessionLocal, test_connection, init_db, close_db_connection
from app.db.base import utcnow
from app.models.user import UserRole
from app.services.realtime import manager
from app.storage import Storage


logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def seed_admin() -> None:
    """Create the bootstrap admin account when ADMIN_USERNAME/ADMIN_PASSWORD are set."""
    if not settings.ADMIN_USERNAME or not settings.ADMIN_PASSWORD:
        return

    db = SessionLocal()
    try:
        storage = Storage(db)
        if storage.get_user_by_username(settings.ADMIN_USERNAME):
            return
        storage.create_user(
            username=settings.ADMIN_USERNAME,
            hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
            role=UserRole.ADMIN,
            name="Administrator",
            email=settings.ADMIN_EMAIL,
        )
        logger.info(f"[OK] Seeded admin account '{settings.ADMIN_USERNAME}'")
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{settings.PROJECT_NAME} v{settings.VERSION} starting (debug={settings.DEBUG})")

    init_db()
    if settings.is_in_memory_db:
        logger.warning("[WARN] In-memory database: all data is lost when the process exits")
    seed_admin()
    if not settings.email_configured:
        logger.warning("[WARN] SMTP not configured, emails will only be logged")
    if not settings.sms_configured:
        logger.warning("[WARN] AT_API_KEY not set, SMS will only be logged")

    yield

    logger.info(f"{settings.PROJECT_NAME} shutting down")
    close_db_connection()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.PROJECT_DESCRIPTION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)


# ==================== MIDDLEWARE ====================

app.add_middleware(GZipMiddleware, minimum_size=1000)

# Credentialed CORS needs explicit origins for the session cookie
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    if request.url.path == "/health":
        return await call_next(request)

    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"[ERROR] {request.method} {request.url.path} failed after "
                     f"{time.perf_counter() - started:.3f}s: {e}")
        raise
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} "
                f"({time.perf_counter() - started:.3f}s)")
    return response


# ==================== ROUTERS ====================

app.include_router(auth_router, prefix="/api", tags=["Authentication"])
app.include_router(staff_router, prefix="/api/staff", tags=["Staff"])
app.include_router(properties_router, prefix="/api/properties", tags=["Properties"])
app.include_router(alerts_router, prefix="/api/alerts", tags=["Security Alerts"])
app.include_router(maintenance_router, prefix="/api/maintenance", tags=["Maintenance"])
app.include_router(invoices_router, prefix="/api/invoices", tags=["Invoices"])
app.include_router(payments_router, prefix="/api/payments", tags=["Payments"])
app.include_router(reminders_router, prefix="/api/reminders", tags=["Payment Reminders"])
app.include_router(websocket_router)


# ==================== ERROR HANDLERS ====================

def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx can carry exception instances
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Invalid payload for {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"success": False, "detail": "Validation error", "errors": jsonable_errors(exc)},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Anything a route did not turn into an HTTPException becomes a 500"""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}\n{traceback.format_exc()}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            # Internals only leak in debug mode
            "detail": str(exc) if settings.DEBUG else "Internal server error",
            "timestamp": utcnow().isoformat(),
        },
    )


# ==================== SYSTEM ====================

@app.get("/", tags=["System"])
async def root():
    return {
        "success": True,
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "docs": "/api/docs",
        "websocket": "/ws",
    }


@app.get("/health", tags=["System"])
async def health_check():
    """Liveness plus database reachability"""
    database_ok = test_connection()
    return {
        "success": True,
        "status": "healthy" if database_ok else "degraded",
        "database": "connected" if database_ok else "disconnected",
        "websocket_clients": len(manager.active_connections),
        "timestamp": utcnow().isoformat(),
    }

"""
FastAPI application entry point
"""
import asyncio

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from advocatedesk.api.api import api_router
from advocatedesk.api.endpoints.dashboard import area_router
from advocatedesk.core.config import settings
from advocatedesk.core.logger import logger
from advocatedesk.db.database import SessionLocal, init_db
from advocatedesk.middleware.correlation import CorrelationMiddleware
from advocatedesk.middleware.role_gate import RoleGateMiddleware
from advocatedesk.services.cleanup_service import sweep_orphans
from advocatedesk.services.storage_service import get_object_store

app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(api_router, prefix="/api")
app.include_router(area_router)

# ── Middleware (last added runs first) ────────────────────────────────────────
app.add_middleware(RoleGateMiddleware)
app.add_middleware(CorrelationMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID"],
)


# ── Error handlers ────────────────────────────────────────────────────────────

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid input", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    correlation_id = getattr(request.state, "correlation_id", None)
    logger.exception("Unhandled error on %s %s [%s]", request.method, request.url.path, correlation_id)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.get("/")
def read_root():
    return {"message": f"{settings.APP_NAME} API is running", "version": "1.0.0"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}


# ── Scheduled loops ───────────────────────────────────────────────────────────

def _run_orphan_sweep():
    db = SessionLocal()
    try:
        result = sweep_orphans(db, get_object_store(), older_than_days=settings.ORPHAN_SWEEP_MIN_AGE_DAYS)
        if result.errors:
            logger.warning("Orphan sweep finished with %d errors", len(result.errors))
    finally:
        db.close()


async def _orphan_sweep_loop() -> None:
    if not settings.ORPHAN_SWEEP_ENABLED:
        logger.info("Orphaned-file sweep disabled")
        return

    interval = max(1, settings.ORPHAN_SWEEP_INTERVAL_HOURS) * 3600
    while True:
        try:
            await asyncio.to_thread(_run_orphan_sweep)
            await asyncio.sleep(interval)
        except asyncio.CancelledError:
            break
        except Exception:
            logger.exception("Orphaned-file sweep crashed")
            await asyncio.sleep(60)


@app.on_event("startup")
async def startup_event():
    logger.info("%s API started", settings.APP_NAME)
    if settings.AUTO_CREATE_TABLES:
        init_db()
    app.state.orphan_sweep_task = asyncio.create_task(_orphan_sweep_loop())


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("%s API shutdown", settings.APP_NAME)
    task = getattr(app.state, "orphan_sweep_task", None)
    if task:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

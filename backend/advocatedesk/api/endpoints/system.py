"""
System status and storage maintenance endpoints
"""
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from advocatedesk.api.deps import require_advocate_or_admin
from advocatedesk.core.config import settings
from advocatedesk.core.logger import logger
from advocatedesk.core.tenancy import Principal
from advocatedesk.db.database import get_db
from advocatedesk.db.schemas import CleanupSummary, StorageStats
from advocatedesk.services.cleanup_service import storage_stats, sweep_orphans
from advocatedesk.services.storage_service import S3ObjectStore, StorageError, get_object_store
from advocatedesk.utils.exceptions import UpstreamFailureError

router = APIRouter()


@router.get("/status")
def system_status(
    db: Session = Depends(get_db),
    store: S3ObjectStore = Depends(get_object_store),
):
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        database = "unavailable"

    storage = "ok" if store.ping() else "unavailable"
    return {
        "status": "healthy" if database == "ok" and storage == "ok" else "degraded",
        "database": database,
        "storage": storage,
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/cleanup")
def storage_cleanup(
    action: str = Query("stats", pattern="^(stats|cleanup)$"),
    principal: Principal = Depends(require_advocate_or_admin),
    db: Session = Depends(get_db),
    store: S3ObjectStore = Depends(get_object_store),
):
    if action == "cleanup":
        result = sweep_orphans(db, store, older_than_days=settings.ORPHAN_SWEEP_MIN_AGE_DAYS)
        return {"action": "cleanup", "result": CleanupSummary(**result.as_dict())}

    try:
        stats = StorageStats(**storage_stats(store))
    except StorageError as e:
        raise UpstreamFailureError("Failed to read storage statistics") from e
    return {"action": "stats", "stats": stats}

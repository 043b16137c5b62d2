"""
Object-store cleanup that follows database deletes.

Every function here is best-effort: failures are logged and returned in a
``CleanupResult`` and never raised to the request that triggered them. Any
remote object removed here has already lost its database record.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from advocatedesk.core.logger import logger
from advocatedesk.db.models import CaseDocument, User
from advocatedesk.utils.helpers import ensure_prefix

MAX_DELETE_WORKERS = 8


@dataclass
class CleanupResult:
    deleted_count: int = 0
    errors: List[str] = field(default_factory=list)

    def merge(self, other: "CleanupResult") -> "CleanupResult":
        self.deleted_count += other.deleted_count
        self.errors.extend(other.errors)
        return self

    def as_dict(self) -> Dict[str, object]:
        return {"deleted_count": self.deleted_count, "errors": list(self.errors)}


def _delete_keys(store, keys: Iterable[str]) -> CleanupResult:
    keys = list(keys)
    result = CleanupResult()
    if not keys:
        return result

    def _delete(key: str) -> Optional[str]:
        try:
            store.delete(key)
            return None
        except Exception as e:
            return f"{key}: {e}"

    with ThreadPoolExecutor(max_workers=min(MAX_DELETE_WORKERS, len(keys))) as pool:
        outcomes = list(pool.map(_delete, keys))

    for outcome in outcomes:
        if outcome is None:
            result.deleted_count += 1
        else:
            result.errors.append(outcome)
    return result


def delete_prefix(store, prefix: str) -> CleanupResult:
    """Delete every object under ``prefix``."""
    prefix = ensure_prefix(prefix)
    try:
        objects = store.list(prefix)
    except Exception as e:
        logger.error(f"Cleanup listing failed for {prefix}: {e}")
        return CleanupResult(errors=[f"list {prefix}: {e}"])

    result = _delete_keys(store, (obj.key for obj in objects))
    if result.errors:
        logger.warning(
            f"Cleanup of {prefix} removed {result.deleted_count} objects with {len(result.errors)} errors"
        )
    else:
        logger.info(f"Cleanup of {prefix} removed {result.deleted_count} objects")
    return result


def cleanup_case_files(store, case_id: str) -> CleanupResult:
    return delete_prefix(store, f"cases/{case_id}/")


def cleanup_client_files(store, user_id: str) -> CleanupResult:
    result = delete_prefix(store, f"profiles/{user_id}/")
    return result.merge(delete_prefix(store, f"avatars/{user_id}/"))


def delete_object_quietly(store, key: Optional[str]) -> bool:
    if not key:
        return False
    try:
        store.delete(key)
        return True
    except Exception as e:
        logger.warning(f"Could not delete object {key}: {e}")
        return False


def _as_aware(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def sweep_orphans(db: Session, store, older_than_days: int = 30) -> CleanupResult:
    """
    Delete objects older than the cut-off that no document record or
    profile image references.
    """
    cutoff = datetime.now(timezone.utc) - timedelta(days=older_than_days)
    try:
        objects = store.list("")
    except Exception as e:
        logger.error(f"Orphan sweep listing failed: {e}")
        return CleanupResult(errors=[f"list: {e}"])

    referenced = {path for (path,) in db.query(CaseDocument.storage_path).all()}
    referenced.update(
        path for (path,) in db.query(User.profile_image_path).filter(User.profile_image_path.isnot(None)).all()
    )

    orphans = []
    for obj in objects:
        modified = _as_aware(obj.last_modified)
        if modified is None or modified >= cutoff:
            continue
        if obj.key in referenced:
            continue
        orphans.append(obj.key)

    result = _delete_keys(store, orphans)
    logger.info(
        f"Orphan sweep: {len(objects)} objects scanned, {result.deleted_count} deleted, {len(result.errors)} errors"
    )
    return result


def storage_stats(store) -> Dict[str, object]:
    objects = store.list("")
    return {
        "total_files": len(objects),
        "total_size": sum(obj.size for obj in objects),
        "bucket_name": getattr(store, "bucket", ""),
    }

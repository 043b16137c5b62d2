"""
JSON export and restore of users, cases and hearings.

Restore replaces every case and hearing with the backup's and upserts users
by email. Cases are inserted as they appear in the file; duplicates inside a
backup are not merged.
"""
from __future__ import annotations

import enum
import json
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import TIMESTAMP
from sqlalchemy.orm import Session

from advocatedesk.core.config import settings
from advocatedesk.core.logger import logger
from advocatedesk.db.models import Case, CaseDocument, CaseNote, CaseTask, Hearing, User
from advocatedesk.utils.exceptions import InvalidInputError, NotFoundError

BACKUP_VERSION = "1.0"


def _serialize(row) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for column in row.__table__.columns:
        value = getattr(row, column.key)
        if isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, enum.Enum):
            value = value.value
        data[column.key] = value
    return data


def _deserialize(model, data: Dict[str, Any]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for column in model.__table__.columns:
        if column.key not in data:
            continue
        value = data[column.key]
        if value is not None and isinstance(column.type, TIMESTAMP) and isinstance(value, str):
            value = datetime.fromisoformat(value)
        values[column.key] = value
    return values


def backup_dir() -> str:
    os.makedirs(settings.BACKUP_DIR, exist_ok=True)
    return settings.BACKUP_DIR


def resolve_backup_path(filename: str) -> str:
    """Map a user-supplied name onto a file inside the backup directory."""
    if not filename or os.path.basename(filename) != filename or not filename.endswith(".json"):
        raise InvalidInputError("Invalid backup file name")
    path = os.path.join(backup_dir(), filename)
    if not os.path.isfile(path):
        raise NotFoundError("Backup file")
    return path


def create_backup(db: Session) -> Dict[str, Any]:
    cases = []
    for case in db.query(Case).all():
        entry = _serialize(case)
        entry["documents"] = [_serialize(d) for d in case.documents]
        entry["notes"] = [_serialize(n) for n in case.notes]
        entry["tasks"] = [_serialize(t) for t in case.tasks]
        cases.append(entry)

    payload = {
        "version": BACKUP_VERSION,
        "created_at": datetime.utcnow().isoformat(),
        "users": [_serialize(u) for u in db.query(User).all()],
        "cases": cases,
        "hearings": [_serialize(h) for h in db.query(Hearing).all()],
    }

    filename = f"backup-{datetime.utcnow().strftime('%Y%m%d-%H%M%S-%f')}.json"
    path = os.path.join(backup_dir(), filename)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2)

    logger.info(
        f"Backup {filename} written: {len(payload['users'])} users, "
        f"{len(cases)} cases, {len(payload['hearings'])} hearings"
    )
    return {
        "filename": filename,
        "size": os.path.getsize(path),
        "counts": {
            "users": len(payload["users"]),
            "cases": len(cases),
            "hearings": len(payload["hearings"]),
        },
    }


def list_backups() -> List[Dict[str, Any]]:
    directory = backup_dir()
    backups = []
    for name in os.listdir(directory):
        if not name.endswith(".json"):
            continue
        path = os.path.join(directory, name)
        stat = os.stat(path)
        backups.append({
            "filename": name,
            "size": stat.st_size,
            "created_at": datetime.utcfromtimestamp(stat.st_mtime).isoformat(),
        })
    backups.sort(key=lambda b: b["created_at"], reverse=True)
    return backups


def _upsert_users(db: Session, users: List[Dict[str, Any]], current_user_id: str) -> Dict[str, str]:
    """Upsert users by email, returning a backup-id -> live-id map."""
    current = db.query(User).filter(User.id == current_user_id).first()
    id_map: Dict[str, str] = {}
    pending_links = []

    for data in users:
        email = (data.get("email") or "").lower()
        old_id = data.get("id")
        if not email:
            continue
        if current is not None and email == current.email:
            id_map[old_id] = current.id
            continue

        values = _deserialize(User, data)
        advocate_id = values.pop("advocate_id", None)
        values.pop("id", None)
        existing = db.query(User).filter(User.email == email).first()
        if existing:
            for key, value in values.items():
                setattr(existing, key, value)
            user = existing
        else:
            if old_id and db.query(User.id).filter(User.id == old_id).first() is None:
                values["id"] = old_id
            user = User(**values)
            db.add(user)
        db.flush()
        id_map[old_id] = user.id
        pending_links.append((user, advocate_id))

    for user, advocate_id in pending_links:
        user.advocate_id = id_map.get(advocate_id, advocate_id) if advocate_id else None
    return id_map


def restore_backup(db: Session, filename: str, current_user_id: str) -> Dict[str, int]:
    path = resolve_backup_path(filename)
    try:
        with open(path, "r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidInputError(f"Unreadable backup file: {e}") from e

    db.query(Hearing).delete()
    db.query(CaseDocument).delete()
    db.query(CaseNote).delete()
    db.query(CaseTask).delete()
    db.query(Case).delete()

    id_map = _upsert_users(db, payload.get("users", []), current_user_id)

    def remap(value: Optional[str]) -> Optional[str]:
        return id_map.get(value, value) if value else value

    restored_cases = 0
    for data in payload.get("cases", []):
        values = _deserialize(Case, data)
        for key in ("advocate_id", "client_id", "created_by"):
            values[key] = remap(values.get(key))
        db.add(Case(**values))
        for model, key, user_field in (
            (CaseDocument, "documents", "uploaded_by"),
            (CaseNote, "notes", "created_by"),
            (CaseTask, "tasks", "assigned_to"),
        ):
            for child in data.get(key, []):
                child_values = _deserialize(model, child)
                child_values[user_field] = remap(child_values.get(user_field))
                db.add(model(**child_values))
        restored_cases += 1

    restored_hearings = 0
    for data in payload.get("hearings", []):
        values = _deserialize(Hearing, data)
        values["advocate_id"] = remap(values.get("advocate_id"))
        values["created_by"] = remap(values.get("created_by"))
        db.add(Hearing(**values))
        restored_hearings += 1

    db.commit()
    logger.info(f"Restored {filename}: {len(id_map)} users, {restored_cases} cases, {restored_hearings} hearings")
    return {"users": len(id_map), "cases": restored_cases, "hearings": restored_hearings}

"""
Case document and profile image uploads.

Size is validated before any remote write. Document metadata is only
committed after the object store accepted the file; if that commit fails the
stored object is removed again.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from advocatedesk.core.config import settings
from advocatedesk.core.logger import logger
from advocatedesk.db.models import Case, CaseDocument, User
from advocatedesk.services.cleanup_service import delete_object_quietly
from advocatedesk.services.storage_service import StorageError
from advocatedesk.utils.exceptions import InvalidInputError, UpstreamFailureError
from advocatedesk.utils.helpers import (
    file_extension,
    random_token,
    sanitize_filename,
    timestamp_millis,
)


def read_upload(upload: UploadFile, max_bytes: int) -> bytes:
    """Read at most ``max_bytes`` from ``upload`` or reject it."""
    data = upload.file.read(max_bytes + 1)
    if len(data) > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        raise InvalidInputError(f"File size exceeds {limit_mb}MB limit")
    return data


def case_document_path(case_id: str, filename: str) -> str:
    return f"cases/{case_id}/{timestamp_millis()}_{sanitize_filename(filename)}"


def upload_case_document(
    db: Session,
    store,
    case: Case,
    data: bytes,
    filename: str,
    content_type: Optional[str],
    uploaded_by: str,
) -> Tuple[CaseDocument, str]:
    """Store ``data`` under the case prefix and record its metadata."""
    if len(data) > settings.MAX_CASE_DOCUMENT_BYTES:
        raise InvalidInputError("File size exceeds 10MB limit")
    if not filename:
        raise InvalidInputError("No file provided")

    content_type = content_type or "application/octet-stream"
    path = case_document_path(case.id, filename)

    try:
        store.save(path, data, content_type=content_type, metadata={"case_id": case.id, "uploaded_by": uploaded_by})
        url = store.signed_read_url(path, expires_in=settings.SIGNED_URL_TTL_SECONDS)
    except StorageError as e:
        logger.error(f"Upload of {path} failed: {e}")
        delete_object_quietly(store, path)
        raise UpstreamFailureError("Failed to upload file") from e

    document = CaseDocument(
        case_id=case.id,
        name=filename,
        content_type=content_type,
        size=len(data),
        storage_path=path,
        uploaded_by=uploaded_by,
        uploaded_at=datetime.utcnow(),
    )
    try:
        db.add(document)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Metadata commit failed for {path}; removing stored object")
        delete_object_quietly(store, path)
        raise
    db.refresh(document)

    logger.info(f"Document {document.id} uploaded to case {case.id}")
    return document, url


def upload_profile_image(db: Session, store, user: User, data: bytes, filename: str, content_type: Optional[str]) -> str:
    """Replace ``user``'s profile image and return a signed URL for it."""
    if not content_type or not content_type.startswith("image/"):
        raise InvalidInputError("Only image files are allowed")
    if len(data) > settings.MAX_PROFILE_IMAGE_BYTES:
        raise InvalidInputError("File size exceeds 2MB limit")

    path = f"profiles/{user.id}/{random_token()}.{file_extension(filename, default='jpg')}"
    try:
        store.save(path, data, content_type=content_type)
        url = store.signed_read_url(path)
    except StorageError as e:
        delete_object_quietly(store, path)
        raise UpstreamFailureError("Failed to upload image") from e

    previous = user.profile_image_path
    user.profile_image_path = path
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        delete_object_quietly(store, path)
        raise

    if previous and previous != path:
        delete_object_quietly(store, previous)
    return url

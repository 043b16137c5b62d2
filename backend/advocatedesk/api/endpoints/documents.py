"""
Document management endpoints
"""
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, Response, UploadFile, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from advocatedesk.api.deps import get_tenant_id, require_advocate_side
from advocatedesk.core.config import settings
from advocatedesk.core.logger import logger
from advocatedesk.core.tenancy import Principal
from advocatedesk.db.database import get_db
from advocatedesk.db.models import Case, CaseDocument, User
from advocatedesk.db.schemas import DocumentListItem, DocumentListResponse, DocumentResponse, Pagination
from advocatedesk.services.attachment_service import read_upload, upload_case_document
from advocatedesk.services.case_service import get_tenant_case
from advocatedesk.services.cleanup_service import delete_object_quietly
from advocatedesk.services.notification_service import (
    NotificationDispatcher,
    document_deleted_email,
    document_uploaded_email,
    get_notifier,
)
from advocatedesk.services.storage_service import S3ObjectStore, StorageError, get_object_store
from advocatedesk.utils.exceptions import InvalidInputError, NotFoundError, UpstreamFailureError
from advocatedesk.utils.helpers import ESCAPE_CHAR, like_pattern, paginate

router = APIRouter()


def _get_tenant_document(db: Session, document_id: str, tenant_id: str) -> CaseDocument:
    document = (
        db.query(CaseDocument)
        .join(Case, CaseDocument.case_id == Case.id)
        .filter(CaseDocument.id == document_id, Case.advocate_id == tenant_id)
        .first()
    )
    if not document:
        raise NotFoundError("Document")
    return document


# ============================================================================
# Endpoints
# ============================================================================

@router.get("", response_model=DocumentListResponse)
def list_documents(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    case_id: Optional[str] = Query(None, alias="caseId"),
    search: Optional[str] = Query(None),
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """All document metadata across the tenant's cases, newest first"""
    query = (
        db.query(CaseDocument, Case, User)
        .join(Case, CaseDocument.case_id == Case.id)
        .join(User, Case.client_id == User.id)
        .filter(Case.advocate_id == tenant_id)
    )
    if case_id:
        query = query.filter(Case.id == case_id)
    if search:
        search_term = like_pattern(search)
        query = query.filter(
            or_(
                CaseDocument.name.ilike(search_term, escape=ESCAPE_CHAR),
                CaseDocument.content_type.ilike(search_term, escape=ESCAPE_CHAR),
                Case.case_number.ilike(search_term, escape=ESCAPE_CHAR),
                User.name.ilike(search_term, escape=ESCAPE_CHAR),
            )
        )

    rows, pagination = paginate(query.order_by(CaseDocument.uploaded_at.desc()), page, limit)
    documents = [
        DocumentListItem(
            **DocumentResponse.model_validate(document).model_dump(),
            case_number=case.case_number,
            case_title=case.title,
            client_name=client.name,
        )
        for document, case, client in rows
    ]
    return DocumentListResponse(documents=documents, pagination=Pagination(**pagination))


@router.post("/upload", status_code=status.HTTP_201_CREATED)
def upload_document(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    case_id: str = Form(..., alias="caseId"),
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
    store: S3ObjectStore = Depends(get_object_store),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    if not file or not file.filename:
        raise InvalidInputError("No file provided")

    case = get_tenant_case(db, case_id, tenant_id)
    data = read_upload(file, settings.MAX_CASE_DOCUMENT_BYTES)

    document, url = upload_case_document(
        db,
        store,
        case,
        data=data,
        filename=file.filename,
        content_type=file.content_type,
        uploaded_by=principal.id,
    )

    client = case.client
    if client is not None:
        message = document_uploaded_email(client.name, case.case_number, document.name)
        background_tasks.add_task(notifier.send, client.email, message["subject"], message["html"])

    return {
        "message": "File uploaded successfully",
        "document": DocumentResponse.model_validate(document),
        "url": url,
    }


@router.get("/{document_id}/download")
def download_document(
    document_id: str,
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
    store: S3ObjectStore = Depends(get_object_store),
):
    document = _get_tenant_document(db, document_id, tenant_id)
    try:
        data = store.read(document.storage_path)
    except StorageError as e:
        raise UpstreamFailureError("Failed to download document") from e

    return Response(
        content=data,
        media_type=document.content_type or "application/octet-stream",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(document.name)}"},
    )


@router.get("/{document_id}/url")
def get_document_url(
    document_id: str,
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
    store: S3ObjectStore = Depends(get_object_store),
):
    """Return a fresh signed URL. Do not store this URL."""
    document = _get_tenant_document(db, document_id, tenant_id)
    try:
        url = store.signed_read_url(document.storage_path, expires_in=settings.SIGNED_URL_TTL_SECONDS)
    except StorageError as e:
        raise UpstreamFailureError("Failed to generate document URL") from e
    return {"url": url, "expires_in": settings.SIGNED_URL_TTL_SECONDS}


@router.delete("/{document_id}")
def delete_document(
    document_id: str,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
    store: S3ObjectStore = Depends(get_object_store),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    document = _get_tenant_document(db, document_id, tenant_id)
    case = document.case
    client = case.client
    path, name = document.storage_path, document.name

    db.delete(document)
    db.commit()

    removed = delete_object_quietly(store, path)
    logger.info(f"Document {document_id} deleted (remote object removed: {removed})")

    if client is not None:
        message = document_deleted_email(client.name, case.case_number, name)
        background_tasks.add_task(notifier.send, client.email, message["subject"], message["html"])

    return {"message": "Document deleted successfully"}

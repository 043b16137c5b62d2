"""
Backup and restore endpoints (admin only)
"""
from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from advocatedesk.api.deps import require_admin
from advocatedesk.core.tenancy import Principal
from advocatedesk.db.database import get_db
from advocatedesk.db.schemas import BackupRestoreRequest
from advocatedesk.services import backup_service

router = APIRouter()


@router.post("/create")
def create_backup(
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    result = backup_service.create_backup(db)
    return {"message": "Backup created successfully", **result}


@router.get("/list")
def list_backups(principal: Principal = Depends(require_admin)):
    return {"backups": backup_service.list_backups()}


@router.get("/download/{filename}")
def download_backup(filename: str, principal: Principal = Depends(require_admin)):
    path = backup_service.resolve_backup_path(filename)
    return FileResponse(path, media_type="application/json", filename=filename)


@router.post("/restore")
def restore_backup(
    body: BackupRestoreRequest,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Replace all cases and hearings with the backup's and upsert its users by
    email. The calling account is never overwritten.
    """
    restored = backup_service.restore_backup(db, body.backup_file, principal.id)
    return {"message": "Backup restored successfully", "restored": restored}

"""
Own-profile endpoints
"""
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from advocatedesk.api.deps import get_current_user
from advocatedesk.core.config import settings
from advocatedesk.db.database import get_db
from advocatedesk.db.models import User
from advocatedesk.db.schemas import ProfileUpdate, UserResponse
from advocatedesk.services.attachment_service import read_upload, upload_profile_image
from advocatedesk.services.cleanup_service import delete_object_quietly
from advocatedesk.services.storage_service import S3ObjectStore, StorageError, get_object_store
from advocatedesk.utils.exceptions import DuplicateKeyError, UpstreamFailureError

router = APIRouter()


@router.get("")
def get_profile(current_user: User = Depends(get_current_user)):
    return {"user": UserResponse.model_validate(current_user)}


@router.put("")
def update_profile(
    body: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    changes = body.model_dump(exclude_unset=True)

    email = changes.pop("email", None)
    if email:
        email = email.strip().lower()
        if email != current_user.email:
            taken = db.query(User.id).filter(User.email == email, User.id != current_user.id).first()
            if taken:
                raise DuplicateKeyError("Email already in use")
            current_user.email = email
            current_user.email_verified = False

    for key, value in changes.items():
        if value is None and key == "name":
            continue
        setattr(current_user, key, value)

    db.commit()
    db.refresh(current_user)
    return {"user": UserResponse.model_validate(current_user)}


# ============================================================================
# Avatar
# ============================================================================

@router.post("/avatar")
def upload_avatar(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: S3ObjectStore = Depends(get_object_store),
):
    data = read_upload(file, settings.MAX_PROFILE_IMAGE_BYTES)
    url = upload_profile_image(db, store, current_user, data, file.filename, file.content_type)
    return {"message": "Profile image updated", "url": url}


@router.get("/avatar")
def get_avatar(
    current_user: User = Depends(get_current_user),
    store: S3ObjectStore = Depends(get_object_store),
):
    """Signed URLs are generated on every fetch and never persisted."""
    if not current_user.profile_image_path:
        return {"url": None}
    try:
        url = store.signed_read_url(current_user.profile_image_path)
    except StorageError as e:
        raise UpstreamFailureError("Failed to generate image URL") from e
    return {"url": url}


@router.delete("/avatar")
def delete_avatar(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: S3ObjectStore = Depends(get_object_store),
):
    path = current_user.profile_image_path
    current_user.profile_image_path = None
    db.commit()
    delete_object_quietly(store, path)
    return {"message": "Profile image removed"}

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from inventory_api.config import get_settings
from inventory_api.core.constants import Role
from inventory_api.core.errors import ValidationError
from inventory_api.core.security import Identity
from inventory_api.dependencies import get_db, require_auth, require_role
from inventory_api.schemas.upload import UploadHistoryRead, UploadResult
from inventory_api.services.upload_service import list_upload_history, process_upload

router = APIRouter(prefix="/upload", tags=["Upload"])


@router.post("", response_model=UploadResult)
def upload_file(
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_auth),
):
    if file is None:
        raise ValidationError("No file uploaded")
    # cap + 1 bytes is enough to detect an oversized file
    content = file.file.read(get_settings().UPLOAD_MAX_BYTES + 1)
    return process_upload(
        db,
        filename=file.filename,
        content_type=file.content_type,
        content=content,
        uploaded_by=identity.user_id,
    )


@router.get("/history", response_model=list[UploadHistoryRead])
def upload_history(
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    _owner=Depends(require_role(Role.OWNER)),
):
    return list_upload_history(db, limit=limit)

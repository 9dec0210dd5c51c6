from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class UploadResult(BaseModel):
    message: str = "File processed successfully"
    rows: int
    data: list[dict[str, Any]]


class UploadHistoryRead(BaseModel):
    id: int
    filename: str
    file_type: Optional[str] = None
    rows_processed: int
    rows_successful: int
    rows_failed: int
    error_log: Optional[str] = None
    uploaded_by: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

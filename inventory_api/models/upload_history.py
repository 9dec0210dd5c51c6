from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text

from inventory_api.database.base import Base


class UploadHistory(Base):
    __tablename__ = "upload_history"

    id = Column(Integer, primary_key=True)
    filename = Column(String(255), nullable=False)
    file_type = Column(String(50))

    rows_processed = Column(Integer, nullable=False, default=0)
    rows_successful = Column(Integer, nullable=False, default=0)
    rows_failed = Column(Integer, nullable=False, default=0)
    error_log = Column(Text)

    uploaded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_upload_history_uploaded_by", "uploaded_by"),
        Index("idx_upload_history_created_at", "created_at"),
    )


__all__ = ["UploadHistory"]

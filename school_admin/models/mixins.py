import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordMixin:
    """Primary key, soft-delete flags and timestamps shared by every table."""

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    is_active = Column(Boolean, nullable=False, default=True)
    is_deleted = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

from sqlalchemy import Boolean, Column, Date, ForeignKey, Index, String, UniqueConstraint, Uuid, text

from school_admin.db.base import Base
from school_admin.models.mixins import RecordMixin


# =====================================================
# ACADEMIC SESSION
# =====================================================

class AcademicSession(RecordMixin, Base):
    __tablename__ = "academic_sessions"

    institute_id = Column(Uuid, ForeignKey("institutes.id"), nullable=False)
    name = Column(String(100), nullable=False)  # e.g. "2024-2025"

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    is_current = Column(Boolean, nullable=False, default=False)

    @property
    def duration_days(self) -> int:
        if not self.start_date or not self.end_date:
            return 0
        return (self.end_date - self.start_date).days

    __table_args__ = (
        UniqueConstraint("institute_id", "name", name="uq_academic_sessions_institute_name"),
        # storage-level guard: one current session per institute
        Index(
            "uq_academic_sessions_one_current",
            "institute_id",
            unique=True,
            postgresql_where=text("is_current"),
            sqlite_where=text("is_current = 1"),
        ),
        Index("ix_academic_sessions_range", "institute_id", "start_date", "end_date"),
    )

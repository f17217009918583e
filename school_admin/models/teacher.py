from sqlalchemy import JSON, Column, Date, ForeignKey, Index, Integer, String, Uuid, text

from school_admin.db.base import Base
from school_admin.models.mixins import RecordMixin


class Teacher(RecordMixin, Base):
    __tablename__ = "teachers"

    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    institute_id = Column(Uuid, ForeignKey("institutes.id"), nullable=False)

    designation = Column(String(100), default="Assistant Teacher")
    department = Column(String(100))
    qualification = Column(JSON, default=list)  # [{degree, university, year}]
    experience = Column(Integer, default=0)
    joining_date = Column(Date)
    specialization = Column(String(100))
    subjects = Column(JSON, default=list)

    __table_args__ = (
        # one live profile per user; deleted profiles do not count
        Index(
            "uq_teachers_live_user",
            "user_id",
            unique=True,
            postgresql_where=text("NOT is_deleted"),
            sqlite_where=text("is_deleted = 0"),
        ),
        Index("ix_teachers_institute_state", "institute_id", "is_active", "is_deleted"),
    )

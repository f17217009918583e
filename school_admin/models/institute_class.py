from sqlalchemy import Column, ForeignKey, Index, Integer, String, Uuid

from school_admin.db.base import Base
from school_admin.models.mixins import RecordMixin


class InstituteClass(RecordMixin, Base):
    __tablename__ = "institute_classes"

    institute_id = Column(Uuid, ForeignKey("institutes.id"), nullable=False)
    academic_session_id = Column(Uuid, ForeignKey("academic_sessions.id"), nullable=False)

    name = Column(String(100), nullable=False)  # "Class 10", "Grade 5"
    section = Column(String(20), nullable=False, default="A")

    class_teacher_id = Column(Uuid, ForeignKey("teachers.id"), nullable=True)
    strength = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index(
            "ix_institute_classes_lookup",
            "institute_id", "academic_session_id", "name", "section"
        ),
    )

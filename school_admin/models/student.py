from sqlalchemy import Column, Date, ForeignKey, Index, String, UniqueConstraint, Uuid, text

from school_admin.db.base import Base
from school_admin.models.mixins import RecordMixin


class Student(RecordMixin, Base):
    __tablename__ = "students"

    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    institute_id = Column(Uuid, ForeignKey("institutes.id"), nullable=False)

    admission_number = Column(String(50), nullable=False)
    roll_number = Column(String(50))
    current_class_id = Column(Uuid, ForeignKey("institute_classes.id"), nullable=True)
    admission_date = Column(Date)
    blood_group = Column(String(5))

    emergency_contact_name = Column(String(100))
    emergency_contact_phone = Column(String(20))
    emergency_contact_relation = Column(String(50))

    __table_args__ = (
        UniqueConstraint(
            "institute_id", "admission_number",
            name="uq_students_institute_admission"
        ),
        Index(
            "uq_students_live_user",
            "user_id",
            unique=True,
            postgresql_where=text("NOT is_deleted"),
            sqlite_where=text("is_deleted = 0"),
        ),
        Index("ix_students_institute_class", "institute_id", "current_class_id"),
    )

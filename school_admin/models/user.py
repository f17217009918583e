from sqlalchemy import (
    CheckConstraint, Column, Date, DateTime, ForeignKey, Index,
    String, UniqueConstraint, Uuid, text
)
from sqlalchemy.orm import relationship

from school_admin.db.base import Base
from school_admin.models.mixins import RecordMixin


# =====================================================
# USER (PRINCIPAL)
# =====================================================

class User(RecordMixin, Base):
    __tablename__ = "users"

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)  # lower-cased, trimmed
    password_hash = Column(String(255), nullable=False)

    country_code = Column(String(8))
    phone_no = Column(String(20))

    role = Column(String(30), nullable=False, default="USER")
    institute_id = Column(
        Uuid,
        ForeignKey("institutes.id"),
        nullable=True  # null only for SUPER_ADMIN
    )

    gender = Column(String(10))
    dob = Column(Date)
    address = Column(String(255))
    profile_url = Column(String(500))

    last_login_at = Column(DateTime(timezone=True), nullable=True)
    # teacher/student profile linked to this login
    profile_id = Column(Uuid, nullable=True)

    institute = relationship("Institute", back_populates="users")

    __table_args__ = (
        CheckConstraint(
            """
            (role = 'SUPER_ADMIN' AND institute_id IS NULL)
            OR
            (role <> 'SUPER_ADMIN' AND institute_id IS NOT NULL)
            """,
            name="ck_users_role_institute_scope"
        ),
        UniqueConstraint("email", "institute_id", name="uq_users_email_institute"),
        UniqueConstraint(
            "phone_no", "country_code", "institute_id",
            name="uq_users_phone_institute"
        ),
        # NULL institute ids are distinct in the constraint above
        Index(
            "uq_users_email_untenanted",
            "email",
            unique=True,
            postgresql_where=text("institute_id IS NULL"),
            sqlite_where=text("institute_id IS NULL"),
        ),
        Index("ix_users_institute_role", "institute_id", "role"),
    )

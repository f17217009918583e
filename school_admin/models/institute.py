from sqlalchemy import Column, Index, Integer, String, Uuid
from sqlalchemy.orm import relationship

from school_admin.db.base import Base
from school_admin.models.mixins import RecordMixin


# =====================================================
# INSTITUTE (TENANT)
# =====================================================

class Institute(RecordMixin, Base):
    __tablename__ = "institutes"

    name = Column(String(150), nullable=False)
    code = Column(String(50), unique=True, nullable=False)  # stored upper-cased
    address = Column(String(255), nullable=False)
    contact_email = Column(String(255), nullable=False)
    contact_phone = Column(String(20), nullable=False)
    max_allowed_users = Column(Integer, default=10)

    owner_id = Column(Uuid, nullable=True)

    users = relationship("User", back_populates="institute")

    __table_args__ = (
        Index("ix_institutes_active_deleted", "is_active", "is_deleted"),
    )

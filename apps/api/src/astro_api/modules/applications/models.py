"""
Membership Application Models

Database model for submitted membership applications.
Records are insert-only: there is no edit or delete path.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from astro_api.core.database import Base


class MemberApplication(Base):
    """
    A prospective member's application.

    ``id`` and ``created_at`` are assigned by the store on insert.
    ``cv_path`` only ever references an object that was stored successfully.
    """

    __tablename__ = "member_applications"

    # Primary key
    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Applicant
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    department: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Motivation
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    skills: Mapped[str | None] = mapped_column(String(500), nullable=True)
    consent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Object store key of the uploaded CV
    cv_path: Mapped[str | None] = mapped_column(String(512), nullable=True)

    # Audit
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_member_applications_email", "email"),
        Index("ix_member_applications_created_at", "created_at"),
    )

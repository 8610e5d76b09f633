"""
Membership Applications Repository

Document Store operations for membership applications.
Only database access lives here; no business rules.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from .models import MemberApplication
from .schemas import ApplicationCreate


async def create(
    db: AsyncSession,
    data: ApplicationCreate,
    cv_path: str | None = None,
) -> MemberApplication:
    """Insert a new application. The store assigns id and created_at."""

    new_application = MemberApplication(
        full_name=data.full_name,
        email=data.email,
        phone=data.phone,
        department=data.department,
        reason=data.reason,
        skills=data.skills,
        consent=data.consent,
        cv_path=cv_path,
    )

    db.add(new_application)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    await db.refresh(new_application)

    return new_application


async def get_by_id(db: AsyncSession, id: UUID) -> MemberApplication | None:
    """Get application by ID."""
    return await db.get(MemberApplication, id)

"""
Admin registry: who may use the dashboard.

Only the list is kept here. Creating credentials is the identity
provider's job; removing an entry revokes dashboard access.
"""

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook.core.errors import AdminExists, AdminNotFound
from shiftbook.core.logging import get_logger
from shiftbook.models.admin import Admin
from shiftbook.schemas.admin import AdminCreate
from shiftbook.services.change_feed import change_feed

logger = get_logger(__name__)


async def add_admin(db: AsyncSession, admin_data: AdminCreate) -> Admin:
    """Register an admin. Emails are matched case-insensitively."""
    email = admin_data.email.lower()

    if await is_admin(db, email):
        logger.warning("admin_add_failed", reason="email_exists", email=email)
        raise AdminExists(email)

    admin = Admin(name=admin_data.name, email=email)
    db.add(admin)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent add of the same email.
        await db.rollback()
        raise AdminExists(email) from None
    await db.refresh(admin)

    logger.info("admin_added", admin_id=admin.id, email=email)
    await change_feed.publish("admins", "created", admin.id)
    return admin


async def list_admins(db: AsyncSession) -> list[Admin]:
    result = await db.execute(select(Admin).order_by(Admin.created_at.asc(), Admin.id.asc()))
    return list(result.scalars().all())


async def is_admin(db: AsyncSession, email: str) -> bool:
    result = await db.execute(select(Admin.id).where(func.lower(Admin.email) == email.lower()))
    return result.first() is not None


async def delete_admin(db: AsyncSession, admin_id: int) -> None:
    result = await db.execute(delete(Admin).where(Admin.id == admin_id))
    if result.rowcount == 0:
        await db.rollback()
        raise AdminNotFound(admin_id)
    await db.commit()

    logger.info("admin_deleted", admin_id=admin_id)
    await change_feed.publish("admins", "deleted", admin_id)

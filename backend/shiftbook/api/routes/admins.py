"""
Admin registry endpoints.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook.db.session import get_db
from shiftbook.schemas.admin import AdminCreate, AdminResponse
from shiftbook.services.admin_service import add_admin, delete_admin, list_admins

router = APIRouter(prefix="/admins", tags=["Admins"])


@router.post("/", response_model=AdminResponse, status_code=status.HTTP_201_CREATED)
async def add_admin_endpoint(admin_data: AdminCreate, db: AsyncSession = Depends(get_db)):
    return await add_admin(db, admin_data)


@router.get("/", response_model=list[AdminResponse])
async def list_admins_endpoint(db: AsyncSession = Depends(get_db)):
    return await list_admins(db)


@router.delete("/{admin_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_admin_endpoint(admin_id: int, db: AsyncSession = Depends(get_db)):
    """Revoke dashboard access."""
    await delete_admin(db, admin_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""
Pydantic schemas for the admin registry.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class AdminCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr


class AdminResponse(BaseModel):
    id: int
    name: str
    email: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

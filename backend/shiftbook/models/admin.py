"""
Admin account registry. Holds who may use the dashboard; credentials live
with the identity provider, not here.
"""

from sqlalchemy import Column, Integer, String

from shiftbook.db.base import Base, TimestampMixin


class Admin(Base, TimestampMixin):
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)  # stored lowercase

    def __repr__(self) -> str:
        return f"<Admin(id={self.id}, email={self.email})>"

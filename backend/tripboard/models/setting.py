"""
Key/value application settings persisted in the database.
"""
from sqlalchemy import Column, String, Text
from tripboard.db.base import BaseModel


class Setting(BaseModel):
    """Runtime setting editable by admins (e.g. the flight API key)."""
    __tablename__ = "settings"

    key = Column(String(100), unique=True, nullable=False, index=True)
    value = Column(Text, nullable=False)

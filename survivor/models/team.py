"""
Teams - clubs that appear as home or visitor in pool matches.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class Team(SQLModel, table=True):
    __tablename__ = "teams"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True, max_length=60)
    flag: str = Field(default="", max_length=16)  # Emoji flag
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

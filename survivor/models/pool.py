"""
Pools - survivor competitions made of rounds ("jornadas") of matches.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class Pool(SQLModel, table=True):
    __tablename__ = "pools"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True, max_length=100)
    starting_lives: int = Field(default=3)  # Lives every new member begins with
    start_date: datetime  # Picks are rejected after this instant
    finished: bool = Field(default=False)  # Flipped once, by the simulation
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

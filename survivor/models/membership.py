"""
Memberships - a participant's standing (lives, elimination) in a pool.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel, UniqueConstraint


class Membership(SQLModel, table=True):
    __tablename__ = "memberships"
    __table_args__ = (
        UniqueConstraint("pool_id", "participant_id", name="uq_membership_pool_participant"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    pool_id: int = Field(foreign_key="pools.id", index=True)
    participant_id: str = Field(index=True, max_length=64)
    lives: float  # Fractional when draws cost half a life
    eliminated: bool = Field(default=False)
    version: int = Field(default=0)  # Optimistic lock, bumped on every write
    joined_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

"""
Pick Sets - the container of a participant's picks in a pool.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel, UniqueConstraint


class PickSet(SQLModel, table=True):
    __tablename__ = "pick_sets"
    __table_args__ = (
        UniqueConstraint("pool_id", "participant_id", name="uq_pick_set_pool_participant"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    pool_id: int = Field(foreign_key="pools.id", index=True)
    participant_id: str = Field(index=True, max_length=64)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

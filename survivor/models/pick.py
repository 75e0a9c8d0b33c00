"""
Picks - one team chosen per match, with its settlement result.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel, UniqueConstraint


class Pick(SQLModel, table=True):
    __tablename__ = "picks"
    __table_args__ = (
        UniqueConstraint("pick_set_id", "match_id", name="uq_pick_set_match"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    pick_set_id: int = Field(foreign_key="pick_sets.id", index=True)
    match_id: str = Field(max_length=40)
    team_id: int = Field(foreign_key="teams.id")
    result: str = Field(default="pending", max_length=10)  # pending | success | fail
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    settled_at: Optional[datetime] = None

"""
Match Outcomes - results recorded pool-wide when a pool is simulated.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel, UniqueConstraint


class MatchOutcome(SQLModel, table=True):
    __tablename__ = "match_outcomes"
    __table_args__ = (
        UniqueConstraint("pool_id", "match_id", name="uq_outcome_pool_match"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    pool_id: int = Field(foreign_key="pools.id", index=True)
    match_id: str = Field(max_length=40)
    winner_team_id: Optional[int] = Field(default=None, foreign_key="teams.id")  # None = draw
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

"""
Pool Matches - the fixtures of each round within a pool.
"""
from typing import Optional

from sqlmodel import Field, SQLModel, UniqueConstraint


class PoolMatch(SQLModel, table=True):
    __tablename__ = "pool_matches"
    __table_args__ = (
        UniqueConstraint("pool_id", "match_id", name="uq_pool_match_id"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    pool_id: int = Field(foreign_key="pools.id", index=True)
    round_number: int  # "Jornada"
    position: int = Field(default=0)  # Order within the round
    match_id: str = Field(max_length=40)  # Unique across all rounds of a pool
    home_team_id: int = Field(foreign_key="teams.id")
    visitor_team_id: int = Field(foreign_key="teams.id")

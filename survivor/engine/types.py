"""
Value types shared by the settlement engine.
"""
from dataclasses import dataclass
from enum import Enum
from typing import NewType, Optional

PoolId = NewType("PoolId", int)
ParticipantId = NewType("ParticipantId", str)
TeamId = NewType("TeamId", int)
MatchId = NewType("MatchId", str)


class PickResult(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAIL = "fail"


@dataclass(frozen=True)
class Outcome:
    """Final result of one match. A missing winner means a draw."""

    match_id: MatchId
    winner_team_id: Optional[TeamId] = None

    @property
    def is_draw(self) -> bool:
        return self.winner_team_id is None

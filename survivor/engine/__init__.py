"""
Settlement engine - pure rules turning match outcomes into lives and rankings.
"""
from survivor.engine.lives import LifeUpdate, apply_life_delta
from survivor.engine.outcome import RandomSource, generate_outcome
from survivor.engine.ranking import RankingEntry, build_ranking
from survivor.engine.settlement import Settlement, settle_pick
from survivor.engine.types import MatchId, Outcome, ParticipantId, PickResult, PoolId, TeamId

__all__ = [
    "LifeUpdate",
    "apply_life_delta",
    "RandomSource",
    "generate_outcome",
    "RankingEntry",
    "build_ranking",
    "Settlement",
    "settle_pick",
    "MatchId",
    "Outcome",
    "ParticipantId",
    "PickResult",
    "PoolId",
    "TeamId",
]

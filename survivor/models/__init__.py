"""
SQLModel models for survivor pools, memberships and picks.
"""
from survivor.models.team import Team
from survivor.models.pool import Pool
from survivor.models.pool_match import PoolMatch
from survivor.models.match_outcome import MatchOutcome
from survivor.models.membership import Membership
from survivor.models.pick_set import PickSet
from survivor.models.pick import Pick

__all__ = [
    "Team",
    "Pool",
    "PoolMatch",
    "MatchOutcome",
    "Membership",
    "PickSet",
    "Pick",
]

"""
Outcome generator - random results for pools that are simulated.
"""
from typing import Protocol

from survivor.engine.types import MatchId, Outcome, TeamId

HOME_WIN_PROBABILITY = 0.4
VISITOR_WIN_PROBABILITY = 0.4
# The remaining 0.2 is a draw


class RandomSource(Protocol):
    def random(self) -> float:
        """Return a float in [0, 1)."""


class Fixture(Protocol):
    match_id: str
    home_team_id: int
    visitor_team_id: int


def generate_outcome(fixture: Fixture, rng: RandomSource) -> Outcome:
    """Draw one outcome for a match: home 40%, visitor 40%, draw 20%."""
    draw = rng.random()
    match_id = MatchId(fixture.match_id)

    if draw < HOME_WIN_PROBABILITY:
        return Outcome(match_id, TeamId(fixture.home_team_id))
    if draw < HOME_WIN_PROBABILITY + VISITOR_WIN_PROBABILITY:
        return Outcome(match_id, TeamId(fixture.visitor_team_id))
    return Outcome(match_id, None)

"""
Pick settlement - classify a pick against a match outcome.
"""
from dataclasses import dataclass
from typing import Optional

from survivor.engine.types import Outcome, PickResult

# Lives lost on a wrong pick, and on a pick whose match never got an outcome
FAIL_PENALTY = 1.0


@dataclass(frozen=True)
class Settlement:
    result: PickResult
    life_delta: float  # Zero or negative


def settle_pick(
    picked_team_id: int,
    outcome: Optional[Outcome],
    draw_penalty: float = FAIL_PENALTY,
) -> Settlement:
    """
    Settle one pick.

    Args:
        picked_team_id: Team the participant chose
        outcome: Final result of the match, None when the match was never resolved
        draw_penalty: Lives lost when the match ends in a draw
    """
    if outcome is None:
        return Settlement(PickResult.FAIL, -FAIL_PENALTY)

    if outcome.is_draw:
        return Settlement(PickResult.FAIL, -draw_penalty)

    if picked_team_id == outcome.winner_team_id:
        return Settlement(PickResult.SUCCESS, 0.0)

    return Settlement(PickResult.FAIL, -FAIL_PENALTY)

"""
Life/elimination update - apply settled deltas to a participant's lives.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class LifeUpdate:
    lives: float
    eliminated: bool
    changed: bool


def apply_life_delta(lives: float, eliminated: bool, delta: float) -> LifeUpdate:
    """
    Apply a summed life delta.

    Lives never go below zero and reaching zero eliminates. An eliminated
    participant is left untouched.
    """
    if delta > 0:
        raise ValueError(f"Life deltas are never positive, got {delta}")

    if eliminated or delta == 0:
        return LifeUpdate(lives=lives, eliminated=eliminated, changed=False)

    new_lives = lives + delta
    if new_lives <= 0:
        return LifeUpdate(lives=0.0, eliminated=True, changed=True)

    return LifeUpdate(lives=new_lives, eliminated=False, changed=True)

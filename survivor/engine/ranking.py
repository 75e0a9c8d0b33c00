"""
Ranking projection - leaderboard of a pool, derived without side effects.
"""
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Protocol

from survivor.engine.types import ParticipantId, PickResult


class Standing(Protocol):
    lives: float
    eliminated: bool


@dataclass(frozen=True)
class RankingEntry:
    participant_id: ParticipantId
    score: int
    lives: float
    eliminated: bool


def count_successes(results: Iterable[str]) -> int:
    return sum(1 for result in results if result == PickResult.SUCCESS.value)


def build_ranking(
    results_by_participant: Mapping[str, Iterable[str]],
    standings: Mapping[str, Standing],
) -> list[RankingEntry]:
    """
    Rank participants by successful picks, then by remaining lives.

    Args:
        results_by_participant: Pick results per participant, in storage order
        standings: Membership per participant; missing ones count as 0 lives, not eliminated
    """
    ranking = []
    for participant_id, results in results_by_participant.items():
        standing: Optional[Standing] = standings.get(participant_id)
        ranking.append(
            RankingEntry(
                participant_id=ParticipantId(participant_id),
                score=count_successes(results),
                lives=standing.lives if standing else 0,
                eliminated=standing.eliminated if standing else False,
            )
        )

    # Stable sort: equal (score, lives) entries keep storage order
    ranking.sort(key=lambda e: (e.score, e.lives), reverse=True)
    return ranking

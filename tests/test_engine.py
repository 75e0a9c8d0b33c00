import random
from types import SimpleNamespace

import pytest

from survivor.engine import (
    Outcome,
    PickResult,
    apply_life_delta,
    build_ranking,
    generate_outcome,
    settle_pick,
)
from conftest import ScriptedRandom

HOME, VISITOR = 10, 20
FIXTURE = SimpleNamespace(match_id="1", home_team_id=HOME, visitor_team_id=VISITOR)


# --- Outcome generation ---

@pytest.mark.parametrize(
    "draw, expected_winner",
    [
        (0.0, HOME),
        (0.3999, HOME),
        (0.4, VISITOR),
        (0.7999, VISITOR),
        (0.8, None),
        (0.9999, None),
    ],
)
def test_generate_outcome_thresholds(draw, expected_winner):
    outcome = generate_outcome(FIXTURE, ScriptedRandom(draw))

    assert outcome.match_id == "1"
    assert outcome.winner_team_id == expected_winner
    assert outcome.is_draw == (expected_winner is None)


def test_generate_outcome_distribution():
    rng = random.Random(1234)
    n = 20000
    winners = [generate_outcome(FIXTURE, rng).winner_team_id for _ in range(n)]

    assert winners.count(HOME) / n == pytest.approx(0.4, abs=0.02)
    assert winners.count(VISITOR) / n == pytest.approx(0.4, abs=0.02)
    assert winners.count(None) / n == pytest.approx(0.2, abs=0.02)


# --- Pick settlement ---

def test_pick_matching_winner_succeeds_without_penalty():
    settlement = settle_pick(HOME, Outcome("1", HOME))

    assert settlement.result == PickResult.SUCCESS
    assert settlement.life_delta == 0


def test_pick_on_loser_fails_with_full_life():
    settlement = settle_pick(HOME, Outcome("1", VISITOR))

    assert settlement.result == PickResult.FAIL
    assert settlement.life_delta == -1


@pytest.mark.parametrize("team", [HOME, VISITOR])
def test_draw_fails_every_pick(team):
    settlement = settle_pick(team, Outcome("1", None))

    assert settlement.result == PickResult.FAIL
    assert settlement.life_delta == -1


def test_draw_uses_configured_penalty():
    settlement = settle_pick(HOME, Outcome("1", None), draw_penalty=0.5)

    assert settlement.result == PickResult.FAIL
    assert settlement.life_delta == -0.5


def test_missing_outcome_fails_with_full_life():
    settlement = settle_pick(HOME, None, draw_penalty=0.5)

    assert settlement.result == PickResult.FAIL
    assert settlement.life_delta == -1


# --- Lives and elimination ---

def test_life_delta_reduces_lives():
    update = apply_life_delta(3, False, -1)

    assert update.lives == 2
    assert update.eliminated is False
    assert update.changed is True


def test_reaching_zero_eliminates():
    update = apply_life_delta(1, False, -1)

    assert update.lives == 0
    assert update.eliminated is True


def test_lives_are_clamped_at_zero():
    update = apply_life_delta(1, False, -3)

    assert update.lives == 0
    assert update.eliminated is True


def test_eliminated_membership_is_untouched():
    update = apply_life_delta(0, True, -1)

    assert update.lives == 0
    assert update.eliminated is True
    assert update.changed is False


def test_zero_delta_is_no_change():
    update = apply_life_delta(2.5, False, 0)

    assert update.lives == 2.5
    assert update.changed is False


def test_positive_delta_is_rejected():
    with pytest.raises(ValueError):
        apply_life_delta(2, False, 1)


# --- Ranking ---

def test_ranking_orders_by_score_then_lives():
    results = {
        "a": ["success", "success", "success"],
        "b": ["success", "success", "success", "fail"],
        "c": ["success", "fail"],
    }
    standings = {
        "a": SimpleNamespace(lives=2, eliminated=False),
        "b": SimpleNamespace(lives=5, eliminated=False),
        "c": SimpleNamespace(lives=9, eliminated=False),
    }

    ranking = build_ranking(results, standings)

    assert [e.participant_id for e in ranking] == ["b", "a", "c"]
    assert [e.score for e in ranking] == [3, 3, 1]
    assert [e.lives for e in ranking] == [5, 2, 9]


def test_ranking_defaults_missing_membership():
    ranking = build_ranking({"ghost": ["success", "pending"]}, {})

    assert len(ranking) == 1
    assert ranking[0].score == 1
    assert ranking[0].lives == 0
    assert ranking[0].eliminated is False


def test_ranking_keeps_order_within_ties():
    results = {"x": ["fail"], "y": ["pending"], "z": []}
    standings = {p: SimpleNamespace(lives=1, eliminated=False) for p in results}

    ranking = build_ranking(results, standings)

    assert [e.participant_id for e in ranking] == ["x", "y", "z"]

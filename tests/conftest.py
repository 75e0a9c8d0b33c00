from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import survivor.models  # noqa: F401
from survivor.models import Membership, Pick, PickSet, Pool, PoolMatch, Team
from survivor.service import SurvivorService

NOW = datetime(2025, 9, 1, 12, 0, tzinfo=timezone.utc)


class ScriptedRandom:
    """Random source returning preset values in order."""

    def __init__(self, *values):
        self.values = list(values)

    def random(self):
        return self.values.pop(0)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def make_pool(session):
    """
    Create a pool; returns (pool_id, team ids by name).

    matches: (match_id, home name, visitor name) tuples, all in round 1.
    """

    def _make_pool(
        matches=(("1", "Home", "Visitor"),),
        starting_lives=3,
        start_date=NOW + timedelta(days=7),
        name="Test Pool",
    ):
        pool = Pool(name=name, starting_lives=starting_lives, start_date=start_date)
        session.add(pool)
        session.flush()

        teams = {}
        for position, (match_id, home, visitor) in enumerate(matches):
            for team_name in (home, visitor):
                if team_name not in teams:
                    team = Team(name=f"{name} {team_name}", flag="🏳")
                    session.add(team)
                    session.flush()
                    teams[team_name] = team.id
            session.add(
                PoolMatch(
                    pool_id=pool.id,
                    round_number=1,
                    position=position,
                    match_id=match_id,
                    home_team_id=teams[home],
                    visitor_team_id=teams[visitor],
                )
            )
        session.commit()
        return pool.id, teams

    return _make_pool


@pytest.fixture
def make_service(session):
    def _make_service(rng=None, now=NOW, draw_penalty=1.0):
        return SurvivorService(session, clock=lambda: now, rng=rng, draw_penalty=draw_penalty)

    return _make_service


@pytest.fixture
def add_standing(session):
    """Insert a membership and pick set directly, with already-settled pick results."""

    def _add_standing(pool_id, participant_id, lives, results=(), team_id=1, eliminated=False):
        session.add(
            Membership(
                pool_id=pool_id,
                participant_id=participant_id,
                lives=lives,
                eliminated=eliminated,
            )
        )
        pick_set = PickSet(pool_id=pool_id, participant_id=participant_id)
        session.add(pick_set)
        session.flush()
        for i, result in enumerate(results):
            session.add(
                Pick(
                    pick_set_id=pick_set.id,
                    match_id=f"m{i}",
                    team_id=team_id,
                    result=result,
                )
            )
        session.commit()

    return _add_standing

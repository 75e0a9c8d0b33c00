"""
Stores - persistence seams between the survivor service and the database.

Stores stage changes on the session; the service decides when to commit.
The one exception is PoolStore.commit_settlement, which is the atomic
"settle this pool if nobody has yet" operation.
"""
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import update
from sqlmodel import Session, select

from survivor.engine.types import MatchId, Outcome, PickResult, TeamId
from survivor.errors import AlreadySettled, NotFound
from survivor.models import MatchOutcome, Membership, Pick, PickSet, Pool, PoolMatch, Team


class PoolStore:
    def __init__(self, session: Session):
        self.session = session

    def get(self, pool_id: int) -> Pool:
        pool = self.session.get(Pool, pool_id)
        if not pool:
            raise NotFound("Survivor not found")
        return pool

    def list_pools(self) -> list[Pool]:
        return list(self.session.exec(select(Pool).order_by(Pool.id)).all())

    def matches(self, pool_id: int) -> list[PoolMatch]:
        """All matches of a pool, in round order."""
        statement = (
            select(PoolMatch)
            .where(PoolMatch.pool_id == pool_id)
            .order_by(PoolMatch.round_number, PoolMatch.position, PoolMatch.id)
        )
        return list(self.session.exec(statement).all())

    def get_match(self, pool_id: int, match_id: str) -> PoolMatch:
        match = self.session.exec(
            select(PoolMatch)
            .where(PoolMatch.pool_id == pool_id)
            .where(PoolMatch.match_id == match_id)
        ).first()
        if not match:
            raise NotFound(f"Match '{match_id}' not found in survivor")
        return match

    def teams(self, team_ids: Iterable[int]) -> dict[int, Team]:
        ids = set(team_ids)
        if not ids:
            return {}
        teams = self.session.exec(select(Team).where(Team.id.in_(ids))).all()
        return {t.id: t for t in teams}

    def outcomes(self, pool_id: int) -> dict[str, Outcome]:
        rows = self.session.exec(
            select(MatchOutcome).where(MatchOutcome.pool_id == pool_id)
        ).all()
        return {
            r.match_id: Outcome(
                MatchId(r.match_id),
                TeamId(r.winner_team_id) if r.winner_team_id is not None else None,
            )
            for r in rows
        }

    def commit_settlement(self, pool_id: int, outcomes: Iterable[Outcome]) -> None:
        """
        Mark the pool finished and store its outcomes, only if it was not finished.

        Raises AlreadySettled when another settlement got there first.
        """
        result = self.session.exec(
            update(Pool)
            .where(Pool.id == pool_id)
            .where(Pool.finished == False)  # noqa: E712
            .values(finished=True)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.session.rollback()
            raise AlreadySettled("Survivor already simulated")

        for outcome in outcomes:
            self.session.add(
                MatchOutcome(
                    pool_id=pool_id,
                    match_id=outcome.match_id,
                    winner_team_id=outcome.winner_team_id,
                )
            )
        self.session.commit()


class MembershipStore:
    def __init__(self, session: Session):
        self.session = session

    def get(self, pool_id: int, participant_id: str) -> Optional[Membership]:
        return self.session.exec(
            select(Membership)
            .where(Membership.pool_id == pool_id)
            .where(Membership.participant_id == participant_id)
        ).first()

    def exists(self, pool_id: int, participant_id: str) -> bool:
        return self.get(pool_id, participant_id) is not None

    def create(self, pool_id: int, participant_id: str, lives: float) -> Membership:
        membership = Membership(
            pool_id=pool_id,
            participant_id=participant_id,
            lives=lives,
            eliminated=False,
        )
        self.session.add(membership)
        return membership

    def list_for_pool(self, pool_id: int) -> list[Membership]:
        return list(
            self.session.exec(
                select(Membership)
                .where(Membership.pool_id == pool_id)
                .order_by(Membership.id)
            ).all()
        )

    def save_if_unchanged(
        self, membership: Membership, lives: float, eliminated: bool, now: datetime
    ) -> bool:
        """Write lives/eliminated only if nobody wrote since `membership` was read."""
        result = self.session.exec(
            update(Membership)
            .where(Membership.id == membership.id)
            .where(Membership.version == membership.version)
            .values(
                lives=lives,
                eliminated=eliminated,
                version=membership.version + 1,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def refresh(self, membership: Membership) -> None:
        self.session.refresh(membership)


class PickSetStore:
    def __init__(self, session: Session):
        self.session = session

    def get(self, pool_id: int, participant_id: str) -> Optional[PickSet]:
        return self.session.exec(
            select(PickSet)
            .where(PickSet.pool_id == pool_id)
            .where(PickSet.participant_id == participant_id)
        ).first()

    def create(self, pool_id: int, participant_id: str) -> PickSet:
        pick_set = PickSet(pool_id=pool_id, participant_id=participant_id)
        self.session.add(pick_set)
        return pick_set

    def find_all_for_pool(self, pool_id: int) -> list[PickSet]:
        return list(
            self.session.exec(
                select(PickSet).where(PickSet.pool_id == pool_id).order_by(PickSet.id)
            ).all()
        )

    def picks(self, pick_set_id: int) -> list[Pick]:
        return list(
            self.session.exec(
                select(Pick).where(Pick.pick_set_id == pick_set_id).order_by(Pick.id)
            ).all()
        )

    def picks_by_set(self, pick_set_ids: Iterable[int]) -> dict[int, list[Pick]]:
        """Picks grouped by pick set, in one query."""
        ids = list(pick_set_ids)
        grouped: dict[int, list[Pick]] = {i: [] for i in ids}
        if not ids:
            return grouped
        picks = self.session.exec(
            select(Pick).where(Pick.pick_set_id.in_(ids)).order_by(Pick.id)
        ).all()
        for pick in picks:
            grouped[pick.pick_set_id].append(pick)
        return grouped

    def pick_for_match(self, pick_set_id: int, match_id: str) -> Optional[Pick]:
        return self.session.exec(
            select(Pick)
            .where(Pick.pick_set_id == pick_set_id)
            .where(Pick.match_id == match_id)
        ).first()

    def upsert_pick(self, pick_set: PickSet, match_id: str, team_id: int, now: datetime) -> Pick:
        """Create a pending pick, or change the team of a still-pending one."""
        pick = self.pick_for_match(pick_set.id, match_id)
        if pick is None:
            pick = Pick(
                pick_set_id=pick_set.id,
                match_id=match_id,
                team_id=team_id,
                result=PickResult.PENDING.value,
                created_at=now,
                updated_at=now,
            )
        elif pick.result != PickResult.PENDING.value:
            raise AlreadySettled(f"Pick for match '{match_id}' is already settled")
        else:
            pick.team_id = team_id
            pick.updated_at = now
        self.session.add(pick)
        return pick

    def mark_settled(self, pick: Pick, result: PickResult, now: datetime) -> bool:
        """Move a pick out of pending. False if it had already been settled."""
        outcome = self.session.exec(
            update(Pick)
            .where(Pick.id == pick.id)
            .where(Pick.result == PickResult.PENDING.value)
            .values(result=result.value, settled_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return outcome.rowcount == 1

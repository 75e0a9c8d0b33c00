"""
Survivor service - joins, picks, settlement and ranking for survivor pools.

The settlement rules live in survivor.engine; this module wires them to the
stores and owns transaction boundaries (one commit per participant settled).
"""
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Mapping, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from survivor.config import DRAW_PENALTY, MEMBERSHIP_UPDATE_ATTEMPTS
from survivor.engine import (
    LifeUpdate,
    MatchId,
    Outcome,
    PickResult,
    RandomSource,
    RankingEntry,
    TeamId,
    apply_life_delta,
    build_ranking,
    generate_outcome,
    settle_pick,
)
from survivor.errors import (
    AlreadyJoined,
    AlreadySettled,
    ConcurrentUpdate,
    InvalidSelection,
    NotFound,
    NothingToSettle,
    NotJoined,
    SurvivorError,
    TooLate,
)
from survivor.models import Membership, Pick, Pool, PoolMatch, Team
from survivor.stores import MembershipStore, PickSetStore, PoolStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite returns naive datetimes; they are always stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# --- Results ---

@dataclass
class PoolDetail:
    pool: Pool
    matches: list[PoolMatch]
    teams: dict[int, Team]
    outcomes: dict[str, Outcome]


@dataclass
class ParticipantSettlement:
    participant_id: str
    results: dict[str, PickResult]  # match_id -> result, picks settled by this call
    life_delta: float
    lives: float
    eliminated: bool


@dataclass
class SettlementReport:
    outcomes: dict[str, Outcome]
    participants: list[ParticipantSettlement] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class SurvivorService:
    def __init__(
        self,
        session: Session,
        clock: Clock = utc_now,
        rng: Optional[RandomSource] = None,
        draw_penalty: float = DRAW_PENALTY,
        update_attempts: int = MEMBERSHIP_UPDATE_ATTEMPTS,
    ):
        self.session = session
        self.pools = PoolStore(session)
        self.memberships = MembershipStore(session)
        self.pick_sets = PickSetStore(session)
        self.clock = clock
        self.rng = rng if rng is not None else random.Random()
        self.draw_penalty = draw_penalty
        self.update_attempts = update_attempts

    # --- Pools ---

    def list_pools(self) -> list[PoolDetail]:
        return [self._detail(pool) for pool in self.pools.list_pools()]

    def get_pool(self, pool_id: int) -> PoolDetail:
        return self._detail(self.pools.get(pool_id))

    def _detail(self, pool: Pool) -> PoolDetail:
        matches = self.pools.matches(pool.id)
        team_ids = [m.home_team_id for m in matches] + [m.visitor_team_id for m in matches]
        return PoolDetail(
            pool=pool,
            matches=matches,
            teams=self.pools.teams(team_ids),
            outcomes=self.pools.outcomes(pool.id),
        )

    # --- Membership ---

    def join(self, pool_id: int, participant_id: str) -> Membership:
        """Create the membership and an empty pick set, with the pool's starting lives."""
        pool = self.pools.get(pool_id)

        if self.memberships.exists(pool_id, participant_id):
            raise AlreadyJoined("User already joined")

        membership = self.memberships.create(pool_id, participant_id, lives=pool.starting_lives)
        self.pick_sets.create(pool_id, participant_id)
        try:
            self.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent join
            self.session.rollback()
            raise AlreadyJoined("User already joined") from None
        self.session.refresh(membership)

        logger.info(
            "[JOIN] participant=%s pool=%s lives=%s", participant_id, pool_id, membership.lives
        )
        return membership

    def status(self, pool_id: int, participant_id: str) -> Membership:
        membership = self.memberships.get(pool_id, participant_id)
        if not membership:
            raise NotFound("User not joined in survivor")
        return membership

    # --- Picks ---

    def submit_picks(
        self, pool_id: int, participant_id: str, selections: Sequence[tuple[str, int]]
    ) -> list[Pick]:
        """
        Save picks as (match_id, team_id) pairs.

        New matches get a pending pick; pending picks switch team; settled picks
        are rejected. Every selection is validated before anything is written.
        """
        if not selections:
            raise InvalidSelection("No picks submitted")

        pool = self.pools.get(pool_id)
        now = self.clock()
        if now > as_utc(pool.start_date):
            raise TooLate("Cannot pick after the survivor has started")

        seen = set()
        for match_id, team_id in selections:
            if match_id in seen:
                raise InvalidSelection(f"Match '{match_id}' picked more than once")
            seen.add(match_id)
            match = self.pools.get_match(pool_id, match_id)
            if team_id not in (match.home_team_id, match.visitor_team_id):
                raise InvalidSelection(f"Invalid team selection for match '{match_id}'")

        membership = self.memberships.get(pool_id, participant_id)
        if not membership:
            raise NotJoined("User has not joined this survivor")
        if membership.eliminated:
            raise InvalidSelection("Eliminated participants cannot pick")

        pick_set = self.pick_sets.get(pool_id, participant_id)
        if not pick_set:
            raise NotFound("Prediction record not found")

        for match_id, _ in selections:
            existing = self.pick_sets.pick_for_match(pick_set.id, match_id)
            if existing and existing.result != PickResult.PENDING.value:
                raise AlreadySettled(f"Pick for match '{match_id}' is already settled")

        picks = [
            self.pick_sets.upsert_pick(pick_set, match_id, team_id, now)
            for match_id, team_id in selections
        ]
        self.session.commit()
        for pick in picks:
            self.session.refresh(pick)

        logger.info(
            "[PREDICT] participant=%s pool=%s picks=%d", participant_id, pool_id, len(picks)
        )
        return picks

    def pick(self, pool_id: int, participant_id: str, match_id: str, team_id: int) -> Pick:
        return self.submit_picks(pool_id, participant_id, [(match_id, team_id)])[0]

    def pick_history(self, pool_id: int, participant_id: str) -> list[Pick]:
        pick_set = self.pick_sets.get(pool_id, participant_id)
        if not pick_set:
            raise NotFound("No predictions found")
        return self.pick_sets.picks(pick_set.id)

    # --- Settlement ---

    def simulate(self, pool_id: int) -> SettlementReport:
        """
        Draw a random outcome for every match, finish the pool and settle all picks.

        Each participant's deltas are summed and applied in a single life update.
        """
        pool = self.pools.get(pool_id)
        if pool.finished:
            raise AlreadySettled("Survivor already simulated")

        pick_sets = self.pick_sets.find_all_for_pool(pool_id)
        if not pick_sets:
            raise NothingToSettle("No predictions found for this survivor")

        outcomes = {
            match.match_id: generate_outcome(match, self.rng)
            for match in self.pools.matches(pool_id)
        }
        self.pools.commit_settlement(pool_id, outcomes.values())

        report = SettlementReport(outcomes=outcomes)
        for pick_set in pick_sets:
            participant_id = pick_set.participant_id
            try:
                settled = self._settle_participant(
                    pool_id, participant_id, self.pick_sets.picks(pick_set.id), outcomes
                )
            except SurvivorError as exc:
                # The pool is already finished; the rest of the batch still settles
                logger.warning(
                    "Skipping participant=%s pool=%s: %s", participant_id, pool_id, exc.detail
                )
                settled = None
            if settled is None:
                report.skipped.append(participant_id)
            else:
                report.participants.append(settled)

        logger.info(
            "[SIMULATE] pool=%s matches=%d settled=%d skipped=%d",
            pool_id,
            len(outcomes),
            len(report.participants),
            len(report.skipped),
        )
        return report

    def resolve_match(
        self,
        pool_id: int,
        match_id: str,
        winner_team_id: Optional[int] = None,
        is_draw: bool = False,
    ) -> SettlementReport:
        """Settle every pending pick on one match against a supplied outcome."""
        self.pools.get(pool_id)
        match = self.pools.get_match(pool_id, match_id)

        if is_draw and winner_team_id is not None:
            raise InvalidSelection("A match cannot have both a winner and a draw")
        if not is_draw:
            if winner_team_id is None:
                raise InvalidSelection("Either a winner team or a draw is required")
            if winner_team_id not in (match.home_team_id, match.visitor_team_id):
                raise InvalidSelection(f"Team {winner_team_id} did not play match '{match_id}'")

        outcome = Outcome(MatchId(match_id), None if is_draw else TeamId(winner_team_id))
        report = SettlementReport(outcomes={match_id: outcome})

        for pick_set in self.pick_sets.find_all_for_pool(pool_id):
            pick = self.pick_sets.pick_for_match(pick_set.id, match_id)
            if pick is None or pick.result != PickResult.PENDING.value:
                continue
            settled = self._settle_participant(
                pool_id, pick_set.participant_id, [pick], report.outcomes
            )
            if settled is None:
                report.skipped.append(pick_set.participant_id)
            else:
                report.participants.append(settled)

        return report

    def _settle_participant(
        self,
        pool_id: int,
        participant_id: str,
        picks: Sequence[Pick],
        outcomes: Mapping[str, Outcome],
    ) -> Optional[ParticipantSettlement]:
        """Settle a participant's pending picks and apply the summed delta, in one commit."""
        membership = self.memberships.get(pool_id, participant_id)
        if membership is None:
            logger.warning(
                "Skipping participant=%s pool=%s: membership missing", participant_id, pool_id
            )
            return None
        if membership.eliminated:
            logger.info(
                "Skipping participant=%s pool=%s: already eliminated", participant_id, pool_id
            )
            return None

        now = self.clock()
        results: dict[str, PickResult] = {}
        delta = 0.0
        for pick in picks:
            if pick.result != PickResult.PENDING.value:
                continue
            settlement = settle_pick(pick.team_id, outcomes.get(pick.match_id), self.draw_penalty)
            if not self.pick_sets.mark_settled(pick, settlement.result, now):
                continue
            results[pick.match_id] = settlement.result
            delta += settlement.life_delta

        update = self._apply_delta(membership, delta, now)
        if update is None:
            logger.warning(
                "Skipping participant=%s pool=%s: eliminated during settlement",
                participant_id,
                pool_id,
            )
            return None
        self.session.commit()

        for match_id, result in results.items():
            logger.info(
                "[SETTLE] participant=%s pool=%s match=%s result=%s lives=%s",
                participant_id,
                pool_id,
                match_id,
                result.value,
                update.lives,
            )
        return ParticipantSettlement(
            participant_id=participant_id,
            results=results,
            life_delta=delta,
            lives=update.lives,
            eliminated=update.eliminated,
        )

    def _apply_delta(
        self, membership: Membership, delta: float, now: datetime
    ) -> Optional[LifeUpdate]:
        """
        Write the life update with an optimistic lock, re-reading on a lost race.

        Returns None, with the pick transitions rolled back, if the re-read
        membership was eliminated by another writer.
        """
        participant_id = membership.participant_id
        for _ in range(self.update_attempts):
            update = apply_life_delta(membership.lives, membership.eliminated, delta)
            if not update.changed:
                return update
            if self.memberships.save_if_unchanged(membership, update.lives, update.eliminated, now):
                return update
            self.memberships.refresh(membership)
            if membership.eliminated:
                self.session.rollback()
                return None

        self.session.rollback()
        raise ConcurrentUpdate(
            f"Membership of {participant_id} changed during settlement, try again"
        )

    # --- Ranking ---

    def ranking(self, pool_id: int) -> list[RankingEntry]:
        self.pools.get(pool_id)
        pick_sets = self.pick_sets.find_all_for_pool(pool_id)
        picks = self.pick_sets.picks_by_set(ps.id for ps in pick_sets)
        results = {
            ps.participant_id: [p.result for p in picks[ps.id]] for ps in pick_sets
        }
        standings = {m.participant_id: m for m in self.memberships.list_for_pool(pool_id)}
        return build_ranking(results, standings)

"""
Survivor router - API endpoints for survivor pools.

Participants join a pool, pick a team per match, and lose lives on wrong or
drawn picks. The caller's identity arrives already authenticated in the
X-User-Id header.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel, Field
from sqlmodel import Session

from survivor.database import get_session
from survivor.engine import Outcome
from survivor.models import Pick, Team
from survivor.service import PoolDetail, SettlementReport, SurvivorService

router = APIRouter(prefix="/api/survivor", tags=["survivor"])


# --- Request/Response Models ---

class TeamInfo(BaseModel):
    id: int
    name: str
    flag: str


class MatchInfo(BaseModel):
    match_id: str
    home: TeamInfo
    visitor: TeamInfo


class RoundInfo(BaseModel):
    round_number: int
    matches: list[MatchInfo]


class OutcomeInfo(BaseModel):
    result: str  # home | visitor | draw
    winner: Optional[TeamInfo] = None


class PoolResponse(BaseModel):
    id: int
    name: str
    starting_lives: int
    start_date: str
    finished: bool
    rounds: list[RoundInfo]
    outcomes: dict[str, OutcomeInfo]


class StatusResponse(BaseModel):
    lives: float
    eliminated: bool
    joined_at: str


class PickInfo(BaseModel):
    match_id: str
    team_picked: int
    result: str


class PicksResponse(BaseModel):
    picks: list[PickInfo]


class PredictionItem(BaseModel):
    match_id: str = Field(min_length=1, max_length=40)
    team_id: int


class PredictRequest(BaseModel):
    predictions: list[PredictionItem] = Field(min_length=1)


class PickRequest(BaseModel):
    pool_id: int
    match_id: str = Field(min_length=1, max_length=40)
    team_id: int


class ResolveMatchRequest(BaseModel):
    pool_id: int
    match_id: str = Field(min_length=1, max_length=40)
    winner_team_id: Optional[int] = None
    is_draw: bool = False


class ParticipantResult(BaseModel):
    participant_id: str
    results: dict[str, str]
    life_delta: float
    lives: float
    eliminated: bool


class SettlementResponse(BaseModel):
    message: str
    results: dict[str, OutcomeInfo]
    participants: list[ParticipantResult]
    skipped: list[str]


class RankingItem(BaseModel):
    participant_id: str
    score: int
    lives: float
    eliminated: bool


class RankingResponse(BaseModel):
    ranking: list[RankingItem]


# --- Dependencies & Utility Functions ---

def get_service(session: Session = Depends(get_session)) -> SurvivorService:
    return SurvivorService(session)


def get_participant_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> str:
    """Identity of the already-authenticated caller."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="X-User-Id header required")
    return x_user_id.strip()


def team_info(team: Team) -> TeamInfo:
    return TeamInfo(id=team.id, name=team.name, flag=team.flag)


def outcome_info(outcome: Outcome, home_team_id: int, teams: dict[int, Team]) -> OutcomeInfo:
    if outcome.is_draw:
        return OutcomeInfo(result="draw")
    result = "home" if outcome.winner_team_id == home_team_id else "visitor"
    return OutcomeInfo(result=result, winner=team_info(teams[outcome.winner_team_id]))


def pool_response(detail: PoolDetail) -> PoolResponse:
    rounds: dict[int, list[MatchInfo]] = {}
    for m in detail.matches:
        rounds.setdefault(m.round_number, []).append(
            MatchInfo(
                match_id=m.match_id,
                home=team_info(detail.teams[m.home_team_id]),
                visitor=team_info(detail.teams[m.visitor_team_id]),
            )
        )

    home_by_match = {m.match_id: m.home_team_id for m in detail.matches}
    outcomes = {
        match_id: outcome_info(outcome, home_by_match.get(match_id), detail.teams)
        for match_id, outcome in detail.outcomes.items()
    }

    return PoolResponse(
        id=detail.pool.id,
        name=detail.pool.name,
        starting_lives=detail.pool.starting_lives,
        start_date=detail.pool.start_date.isoformat(),
        finished=detail.pool.finished,
        rounds=[RoundInfo(round_number=n, matches=ms) for n, ms in rounds.items()],
        outcomes=outcomes,
    )


def settlement_response(
    message: str, report: SettlementReport, detail: PoolDetail
) -> SettlementResponse:
    home_by_match = {m.match_id: m.home_team_id for m in detail.matches}
    return SettlementResponse(
        message=message,
        results={
            match_id: outcome_info(outcome, home_by_match.get(match_id), detail.teams)
            for match_id, outcome in report.outcomes.items()
        },
        participants=[
            ParticipantResult(
                participant_id=p.participant_id,
                results={match_id: r.value for match_id, r in p.results.items()},
                life_delta=p.life_delta,
                lives=p.lives,
                eliminated=p.eliminated,
            )
            for p in report.participants
        ],
        skipped=report.skipped,
    )


def pick_info(pick: Pick) -> PickInfo:
    return PickInfo(match_id=pick.match_id, team_picked=pick.team_id, result=pick.result)


# --- Endpoints ---

@router.get("", response_model=list[PoolResponse])
def list_pools(service: SurvivorService = Depends(get_service)):
    """Get all survivor pools with their rounds and matches."""
    return [pool_response(detail) for detail in service.list_pools()]


@router.get("/status/{participant_id}/{pool_id}", response_model=StatusResponse)
def get_status(
    participant_id: str,
    pool_id: int,
    service: SurvivorService = Depends(get_service),
):
    """Get a participant's lives and elimination state in a pool."""
    membership = service.status(pool_id, participant_id)
    return StatusResponse(
        lives=membership.lives,
        eliminated=membership.eliminated,
        joined_at=membership.joined_at.isoformat(),
    )


@router.get("/picks/{participant_id}/{pool_id}", response_model=PicksResponse)
def get_picks(
    participant_id: str,
    pool_id: int,
    service: SurvivorService = Depends(get_service),
):
    """Get a participant's pick history in a pool."""
    return PicksResponse(picks=[pick_info(p) for p in service.pick_history(pool_id, participant_id)])


@router.get("/ranking/{pool_id}", response_model=RankingResponse)
def get_ranking(pool_id: int, service: SurvivorService = Depends(get_service)):
    """
    Get the leaderboard of a pool.

    Sorted by successful picks, then by remaining lives.
    """
    return RankingResponse(
        ranking=[
            RankingItem(
                participant_id=e.participant_id,
                score=e.score,
                lives=e.lives,
                eliminated=e.eliminated,
            )
            for e in service.ranking(pool_id)
        ]
    )


@router.get("/{pool_id}", response_model=PoolResponse)
def get_pool(pool_id: int, service: SurvivorService = Depends(get_service)):
    """Get one pool, including the outcomes once it has been simulated."""
    return pool_response(service.get_pool(pool_id))


@router.post("/join/{pool_id}", status_code=201)
def join_pool(
    pool_id: int,
    participant_id: str = Depends(get_participant_id),
    service: SurvivorService = Depends(get_service),
):
    """
    Join a pool.

    The participant starts with the pool's starting lives and no picks.
    """
    membership = service.join(pool_id, participant_id)
    return {"message": "Successfully joined survivor", "lives": membership.lives}


@router.post("/predict/{pool_id}", response_model=PicksResponse)
def predict(
    pool_id: int,
    request: PredictRequest,
    participant_id: str = Depends(get_participant_id),
    service: SurvivorService = Depends(get_service),
):
    """
    Save several picks at once.

    Re-picking a match that is still pending switches the team.
    """
    picks = service.submit_picks(
        pool_id,
        participant_id,
        [(p.match_id, p.team_id) for p in request.predictions],
    )
    return PicksResponse(picks=[pick_info(p) for p in picks])


@router.post("/pick", response_model=PickInfo)
def pick_team(
    request: PickRequest,
    participant_id: str = Depends(get_participant_id),
    service: SurvivorService = Depends(get_service),
):
    """Pick the winning team of a single match."""
    pick = service.pick(request.pool_id, participant_id, request.match_id, request.team_id)
    return pick_info(pick)


@router.post("/simulate/{pool_id}", response_model=SettlementResponse)
def simulate(pool_id: int, service: SurvivorService = Depends(get_service)):
    """
    Simulate every match of a pool and settle all picks.

    Can run only once per pool.
    """
    report = service.simulate(pool_id)
    return settlement_response("Simulation completed", report, service.get_pool(pool_id))


@router.post("/resolve-match", response_model=SettlementResponse)
def resolve_match(
    request: ResolveMatchRequest,
    service: SurvivorService = Depends(get_service),
):
    """Settle one match with a known winner (or a draw) and update lives."""
    report = service.resolve_match(
        request.pool_id,
        request.match_id,
        winner_team_id=request.winner_team_id,
        is_draw=request.is_draw,
    )
    return settlement_response(
        "Match resolved and lives updated", report, service.get_pool(request.pool_id)
    )

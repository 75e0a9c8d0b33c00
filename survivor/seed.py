"""
Seed survivor pools (teams, rounds and matches) from data/pools.json.
"""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from survivor.models import Pool, PoolMatch, Team

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_POOLS_FILE = PROJECT_ROOT / "data" / "pools.json"


def load_pools_from_json(json_path: Path) -> list[dict]:
    """Load pool definitions from JSON file."""
    with open(json_path, "r", encoding="utf-8") as f:
        return json.load(f)


def get_or_create_team(session: Session, team: dict) -> Team:
    existing = session.exec(select(Team).where(Team.name == team["name"])).first()
    if existing:
        return existing

    new_team = Team(name=team["name"], flag=team.get("flag", ""))
    session.add(new_team)
    session.flush()
    return new_team


def seed_pools(engine: Engine, json_path: Optional[Path] = None) -> int:
    """
    Seed pools from JSON file, skipping pools whose name already exists.
    Returns the number of pools inserted.
    """
    pools_data = load_pools_from_json(json_path or DEFAULT_POOLS_FILE)
    count = 0

    with Session(engine) as session:
        for pool_data in pools_data:
            existing = session.exec(
                select(Pool).where(Pool.name == pool_data["name"])
            ).first()
            if existing:
                logger.info("Pool '%s' already seeded, skipping", pool_data["name"])
                continue

            pool = Pool(
                name=pool_data["name"],
                starting_lives=pool_data.get("starting_lives", 3),
                start_date=datetime.fromisoformat(pool_data["start_date"]),
            )
            session.add(pool)
            session.flush()

            for round_data in pool_data["rounds"]:
                for position, match in enumerate(round_data["matches"]):
                    home = get_or_create_team(session, match["home"])
                    visitor = get_or_create_team(session, match["visitor"])
                    session.add(
                        PoolMatch(
                            pool_id=pool.id,
                            round_number=round_data["round_number"],
                            position=position,
                            match_id=str(match["match_id"]),
                            home_team_id=home.id,
                            visitor_team_id=visitor.id,
                        )
                    )
            count += 1

        session.commit()

    return count

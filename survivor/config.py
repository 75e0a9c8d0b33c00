"""
Server configuration - loads database and game settings from environment variables.
"""
import os
from dotenv import load_dotenv

load_dotenv()

PGHOST = os.getenv("PGHOST")
PGUSER = os.getenv("PGUSER")
PGPORT = os.getenv("PGPORT", "5432")
PGDATABASE = os.getenv("PGDATABASE")
PGPASSWORD = os.getenv("PGPASSWORD")

if all([PGHOST, PGUSER, PGDATABASE, PGPASSWORD]):
    DATABASE_URL = (
        f"postgresql://{PGUSER}:{PGPASSWORD}@{PGHOST}:{PGPORT}/{PGDATABASE}?sslmode=require"
    )
else:
    DATABASE_URL = "sqlite:///./data/survivor.db"

# Lives lost for a pick on a drawn match. 1.0 is the canonical rule; 0.5 the half-life variant.
DRAW_PENALTY = float(os.getenv("SURVIVOR_DRAW_PENALTY", "1.0"))
if DRAW_PENALTY <= 0:
    raise ValueError(f"SURVIVOR_DRAW_PENALTY must be positive, got {DRAW_PENALTY}")

# Optimistic re-reads of a membership before a settlement gives up
MEMBERSHIP_UPDATE_ATTEMPTS = int(os.getenv("SURVIVOR_MEMBERSHIP_UPDATE_ATTEMPTS", "3"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

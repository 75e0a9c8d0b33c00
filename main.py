import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from survivor.config import LOG_LEVEL
from survivor.database import create_db_and_tables
from survivor.errors import SurvivorError
from survivor.routers import survivor

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Survivor Pool API")


@app.on_event("startup")
def _startup_create_tables() -> None:
    create_db_and_tables()
    logger.info("Database tables ready")


@app.exception_handler(SurvivorError)
async def handle_survivor_error(request: Request, exc: SurvivorError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# Allow CORS from any origin (for local development with file://)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(survivor.router)


@app.get("/api/health")
def health():
    return {"status": "ok"}

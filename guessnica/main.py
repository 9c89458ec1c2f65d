import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from sqlmodel import Session

from guessnica.config import get_settings
from guessnica.database import engine, init_db
from guessnica.routers import user, game, locations, riddles, leaderboard
from guessnica.seed import seed_database

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if settings.seed_on_startup:
        with Session(engine) as session:
            seed_database(session, settings.seed_file)
    logger.info("Guessnica started, daily rollover at %02d:00 UTC", settings.daily_rollover_hour_utc)
    yield


app = FastAPI(
    title="Guessnica",
    description="Daily location guessing game",
    version="1.0.0",
    lifespan=lifespan,
)

# Routers
app.include_router(user.router)
app.include_router(game.router)
app.include_router(locations.router)
app.include_router(riddles.router)
app.include_router(leaderboard.router)


@app.get("/health")
async def health():
    return {"status": "ok"}


def run():
    import uvicorn

    uvicorn.run("guessnica.main:app", host=settings.app_host, port=settings.app_port)

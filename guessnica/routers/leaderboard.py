from fastapi import APIRouter, Depends
from sqlmodel import Session
from guessnica.database import get_session
from guessnica.dependencies import get_current_user
from guessnica.models import User, LeaderboardCategory, LeaderboardResponse, UserRank
from guessnica.stats import get_leaderboard, get_user_rank, clamp, MIN_DAYS, MAX_DAYS

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


@router.get("", response_model=LeaderboardResponse)
def leaderboard(
    days: int = 7,
    count: int = 10,
    category: LeaderboardCategory = LeaderboardCategory.TOTAL_SCORE,
    session: Session = Depends(get_session),
):
    """Top players over the last `days` days, ordered by the given category."""
    entries = get_leaderboard(session, days=days, count=count, category=category)
    return LeaderboardResponse(
        days=clamp(days, MIN_DAYS, MAX_DAYS), category=category, entries=entries
    )


@router.get("/rank", response_model=UserRank)
def rank(
    days: int = 7,
    category: LeaderboardCategory = LeaderboardCategory.TOTAL_SCORE,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return get_user_rank(session, user.id, days=days, category=category)

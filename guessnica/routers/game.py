from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
from guessnica.config import get_settings
from guessnica.database import get_session
from guessnica.dependencies import get_current_user
from guessnica.game import (
    get_daily_assignment, submit_answer,
    NoAvailableRiddles, NoAssignmentToday, AlreadyAnswered,
)
from guessnica.models import User, AnswerSubmit, AnswerResult, DailyRiddleResponse

settings = get_settings()
router = APIRouter(prefix="/api/game", tags=["game"])


@router.get("/daily", response_model=DailyRiddleResponse)
def daily(user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    """Get today's riddle for the user, assigning one if needed."""
    try:
        assignment = get_daily_assignment(session, user.id, settings.daily_rollover_hour_utc)
    except NoAvailableRiddles:
        raise HTTPException(status_code=404, detail="No riddles left to solve")

    riddle = assignment.riddle
    return DailyRiddleResponse(
        user_riddle_id=assignment.id,
        riddle_id=riddle.id,
        image_url=riddle.location.image_url,
        short_description=riddle.location.short_description,
        description=riddle.description,
        difficulty=int(riddle.difficulty),
        time_limit_seconds=riddle.time_limit_seconds,
        max_distance_meters=riddle.max_distance_meters,
        assigned_at=assignment.assigned_at,
        is_answered=assignment.is_answered,
    )


@router.post("/answer", response_model=AnswerResult)
def answer(
    data: AnswerSubmit,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Submit a coordinate guess for today's riddle."""
    try:
        assignment = submit_answer(
            session, user.id, data.latitude, data.longitude, settings.daily_rollover_hour_utc
        )
    except (NoAssignmentToday, AlreadyAnswered) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return AnswerResult(
        points=assignment.points,
        distance_meters=assignment.distance_meters,
        time_seconds=assignment.time_seconds,
        is_correct=assignment.is_correct,
    )

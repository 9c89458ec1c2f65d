"""
Daily riddle assignment and answer scoring.

A game-day is the 24 hour window starting at the configured rollover hour
(UTC). Each user gets at most one assignment per game-day, and each
assignment can be answered exactly once.
"""
import logging
import random
from datetime import datetime, time, timedelta, timezone
from typing import Optional
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, col
from guessnica.models import Riddle, RiddleAssignment
from guessnica.scoring import haversine_distance, calculate_score, is_answer_correct

logger = logging.getLogger(__name__)


class GameError(RuntimeError):
    """Base class for expected business-rule failures of the game."""


class NoAvailableRiddles(GameError):
    def __init__(self):
        super().__init__("No available riddles")


class NoAssignmentToday(GameError):
    def __init__(self):
        super().__init__("No riddle assigned for today")


class AlreadyAnswered(GameError):
    def __init__(self):
        super().__init__("Riddle already answered")


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything stored is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def game_day_window(now: datetime, rollover_hour_utc: int = 0) -> tuple[datetime, datetime]:
    """Return the half-open [start, end) window of the game-day containing now."""
    if not 0 <= rollover_hour_utc <= 23:
        raise ValueError(f"Rollover hour must be within 0..23, got {rollover_hour_utc}")

    now = as_utc(now)
    day_start = datetime.combine(now.date(), time(hour=rollover_hour_utc), tzinfo=timezone.utc)
    if now < day_start:
        # Before today's rollover: the game-day started yesterday
        day_start -= timedelta(days=1)

    return day_start, day_start + timedelta(days=1)


def _find_assignment(
    session: Session, user_id: str, day_start: datetime, day_end: datetime
) -> Optional[RiddleAssignment]:
    found = session.exec(
        select(RiddleAssignment)
        .where(RiddleAssignment.user_id == user_id)
        .where(RiddleAssignment.assigned_at >= day_start)
        .where(RiddleAssignment.assigned_at < day_end)
    ).first()
    if found is not None:
        return found

    # A row created under a different rollover hour still owns this game-day
    return session.exec(
        select(RiddleAssignment)
        .where(RiddleAssignment.user_id == user_id)
        .where(RiddleAssignment.game_day == day_start.date())
    ).first()


def get_daily_assignment(
    session: Session,
    user_id: str,
    rollover_hour_utc: int = 0,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> RiddleAssignment:
    """
    Return the user's assignment for the current game-day, creating one
    if there is none yet. Riddles the user has already solved correctly
    are never assigned again.
    """
    now = as_utc(now or datetime.now(timezone.utc))
    day_start, day_end = game_day_window(now, rollover_hour_utc)

    existing = _find_assignment(session, user_id, day_start, day_end)
    if existing is not None:
        return existing

    solved = (
        select(RiddleAssignment.riddle_id)
        .where(RiddleAssignment.user_id == user_id)
        .where(col(RiddleAssignment.is_correct).is_(True))
    )
    candidates = session.exec(
        select(Riddle).where(col(Riddle.id).not_in(solved)).order_by(Riddle.id)
    ).all()

    if not candidates:
        raise NoAvailableRiddles()

    picked = (rng or random).choice(candidates)

    assignment = RiddleAssignment(
        user_id=user_id,
        riddle_id=picked.id,
        game_day=day_start.date(),
        assigned_at=now,
    )
    session.add(assignment)
    try:
        session.commit()
    except IntegrityError:
        # A concurrent request created today's assignment first
        session.rollback()
        logger.info("Lost assignment race for user %s on %s", user_id, day_start.date())
        winner = _find_assignment(session, user_id, day_start, day_end)
        if winner is None:
            raise
        return winner

    session.refresh(assignment)
    logger.info(
        "Assigned riddle %s to user %s for game-day %s (%d candidates)",
        picked.id, user_id, day_start.date(), len(candidates),
    )
    return assignment


def submit_answer(
    session: Session,
    user_id: str,
    latitude: float,
    longitude: float,
    rollover_hour_utc: int = 0,
    now: Optional[datetime] = None,
) -> RiddleAssignment:
    """
    Score a guess for today's assignment and store the result.

    Raises NoAssignmentToday if the user has not fetched a riddle in the
    current game-day and AlreadyAnswered if the assignment was answered.
    """
    now = as_utc(now or datetime.now(timezone.utc))
    day_start, day_end = game_day_window(now, rollover_hour_utc)

    assignment = _find_assignment(session, user_id, day_start, day_end)
    if assignment is None:
        raise NoAssignmentToday()
    if assignment.answered_at is not None:
        raise AlreadyAnswered()

    riddle = assignment.riddle
    target = riddle.location

    distance = haversine_distance(latitude, longitude, target.latitude, target.longitude)
    elapsed = max(0, int((now - as_utc(assignment.assigned_at)).total_seconds()))
    correct = is_answer_correct(
        distance, elapsed, riddle.max_distance_meters, riddle.time_limit_seconds
    )
    # Points are awarded for incorrect answers too (partial credit)
    points = calculate_score(int(riddle.difficulty), distance, elapsed, riddle.max_distance_meters)

    result = session.exec(
        update(RiddleAssignment)
        .where(col(RiddleAssignment.id) == assignment.id)
        .where(col(RiddleAssignment.answered_at).is_(None))
        .values(
            submitted_latitude=latitude,
            submitted_longitude=longitude,
            distance_meters=distance,
            time_seconds=elapsed,
            points=points,
            is_correct=correct,
            answered_at=now,
        )
    )
    if result.rowcount == 0:
        session.rollback()
        raise AlreadyAnswered()

    session.commit()
    session.refresh(assignment)
    logger.info(
        "User %s answered assignment %s: %.1f m in %d s, correct=%s, points=%d",
        user_id, assignment.id, distance, elapsed, correct, points,
    )
    return assignment

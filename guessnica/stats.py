from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy import case, func
from sqlmodel import Session, select, col
from guessnica.models import (
    User, Location, Riddle, RiddleAssignment,
    LeaderboardCategory, LeaderboardEntry, UserRank,
    UserStatsSummary, UserHistoryEntry,
)

MIN_DAYS, MAX_DAYS = 1, 3650
MIN_COUNT, MAX_COUNT = 1, 200


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _aggregate(session: Session, days: int, now: Optional[datetime] = None) -> list[dict]:
    """Per-user aggregates over assignments answered in the last `days` days."""
    since = (now or datetime.now(timezone.utc)) - timedelta(days=days)

    rows = session.exec(
        select(
            RiddleAssignment.user_id,
            func.count(col(RiddleAssignment.id)),
            func.sum(case((col(RiddleAssignment.is_correct).is_(True), 1), else_=0)),
            func.coalesce(func.sum(RiddleAssignment.points), 0),
            func.avg(RiddleAssignment.time_seconds),
        )
        .where(col(RiddleAssignment.answered_at).is_not(None))
        .where(col(RiddleAssignment.answered_at) >= since)
        .group_by(RiddleAssignment.user_id)
        .order_by(RiddleAssignment.user_id)
    ).all()

    result = []
    for user_id, played, correct, points, avg_time in rows:
        result.append({
            "user_id": user_id,
            "games_played": int(played),
            "correct_answers": int(correct or 0),
            "total_points": int(points or 0),
            "average_time_seconds": float(avg_time) if avg_time is not None else None,
            "accuracy": (correct or 0) / played if played else None,
        })
    return result


def _ordered(aggregates: list[dict], category: LeaderboardCategory) -> list[dict]:
    if category == LeaderboardCategory.ACCURACY:
        key = lambda x: (
            -(x["accuracy"] if x["accuracy"] is not None else -1),
            -x["correct_answers"],
        )
    elif category == LeaderboardCategory.GAMES_PLAYED:
        key = lambda x: -x["games_played"]
    elif category == LeaderboardCategory.AVERAGE_TIME:
        key = lambda x: (
            x["average_time_seconds"] if x["average_time_seconds"] is not None else float("inf")
        )
    else:
        key = lambda x: -x["total_points"]
    return sorted(aggregates, key=key)


def get_leaderboard(
    session: Session,
    days: int = 7,
    count: int = 10,
    category: LeaderboardCategory = LeaderboardCategory.TOTAL_SCORE,
    now: Optional[datetime] = None,
) -> list[LeaderboardEntry]:
    days = clamp(days, MIN_DAYS, MAX_DAYS)
    count = clamp(count, MIN_COUNT, MAX_COUNT)

    top = _ordered(_aggregate(session, days, now), category)[:count]

    user_ids = [x["user_id"] for x in top]
    names = {}
    if user_ids:
        names = dict(session.exec(
            select(User.id, User.display_name).where(col(User.id).in_(user_ids))
        ).all())

    return [
        LeaderboardEntry(rank=index + 1, display_name=names.get(x["user_id"], "Unknown"), **x)
        for index, x in enumerate(top)
    ]


def get_user_rank(
    session: Session,
    user_id: str,
    days: int = 7,
    category: LeaderboardCategory = LeaderboardCategory.TOTAL_SCORE,
    now: Optional[datetime] = None,
) -> UserRank:
    days = clamp(days, MIN_DAYS, MAX_DAYS)
    ranked = _ordered(_aggregate(session, days, now), category)

    for index, entry in enumerate(ranked):
        if entry["user_id"] == user_id:
            fields = {k: v for k, v in entry.items() if k != "user_id"}
            return UserRank(
                rank=index + 1, total_users=len(ranked), days=days, category=category, **fields
            )

    return UserRank(rank=None, total_users=len(ranked), days=days, category=category)


def get_user_stats(session: Session, user: User) -> UserStatsSummary:
    assignments = session.exec(
        select(RiddleAssignment)
        .where(RiddleAssignment.user_id == user.id)
        .order_by(RiddleAssignment.assigned_at)
    ).all()

    answered = [a for a in assignments if a.answered_at is not None]
    correct = [a for a in answered if a.is_correct]
    distances = [a.distance_meters for a in answered if a.distance_meters is not None]

    # Streaks count consecutive correct answers in answer order
    current = best = 0
    for a in sorted(answered, key=lambda a: a.answered_at):
        if a.is_correct:
            current += 1
            best = max(best, current)
        else:
            current = 0

    correct_points = [a.points or 0 for a in correct]

    return UserStatsSummary(
        assigned=len(assignments),
        answered=len(answered),
        correct=len(correct),
        incorrect=len(answered) - len(correct),
        total_score=sum(correct_points),
        avg_score=sum(correct_points) / len(correct_points) if correct_points else 0.0,
        current_streak=current,
        best_streak=best,
        total_distance_meters=sum(distances),
        avg_distance_meters=sum(distances) / len(distances) if distances else 0.0,
        account_created_at=user.created_at,
    )


def get_user_history(session: Session, user_id: str) -> list[UserHistoryEntry]:
    rows = session.exec(
        select(RiddleAssignment, Location.short_description)
        .join(Riddle, col(Riddle.id) == RiddleAssignment.riddle_id)
        .join(Location, col(Location.id) == Riddle.location_id)
        .where(RiddleAssignment.user_id == user_id)
        .where(col(RiddleAssignment.answered_at).is_not(None))
        .order_by(col(RiddleAssignment.answered_at).desc())
    ).all()

    return [
        UserHistoryEntry(
            id=a.id,
            riddle_id=a.riddle_id,
            answered_at=a.answered_at,
            is_correct=bool(a.is_correct),
            points=a.points or 0,
            distance_meters=a.distance_meters,
            time_seconds=a.time_seconds,
            location_name=location_name,
        )
        for a, location_name in rows
    ]

"""Tests for leaderboard aggregation and per-user statistics."""
from datetime import datetime, timedelta, timezone

import pytest

from guessnica.models import RiddleAssignment, LeaderboardCategory
from guessnica.stats import get_leaderboard, get_user_rank, get_user_stats, get_user_history

NOW = datetime(2024, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def answered(session):
    """Store an already answered assignment directly."""
    def _answered(user, riddle, days_ago, correct, points, time_seconds=60, distance=10.0):
        assigned = NOW - timedelta(days=days_ago, minutes=5)
        a = RiddleAssignment(
            user_id=user.id,
            riddle_id=riddle.id,
            game_day=assigned.date(),
            assigned_at=assigned,
            answered_at=assigned + timedelta(seconds=time_seconds),
            is_correct=correct,
            points=points,
            time_seconds=time_seconds,
            distance_meters=distance,
            submitted_latitude=riddle.location.latitude,
            submitted_longitude=riddle.location.longitude,
        )
        session.add(a)
        session.commit()
        return a

    return _answered


@pytest.fixture
def players(session, make_user, make_riddle, answered):
    riddle = make_riddle()
    anna = make_user("Anna")
    jan = make_user("Jan")
    ewa = make_user("Ewa")

    # Anna: 2 games, 1 correct, 1500 points, avg 90 s
    answered(anna, riddle, 1, True, 1000, time_seconds=60)
    answered(anna, riddle, 2, False, 500, time_seconds=120)
    # Jan: 3 games, 3 correct, 900 points, avg 200 s
    answered(jan, riddle, 1, True, 300, time_seconds=200)
    answered(jan, riddle, 2, True, 300, time_seconds=200)
    answered(jan, riddle, 3, True, 300, time_seconds=200)
    # Ewa: 1 game, 1 correct, 2000 points, avg 30 s, but 20 days ago
    answered(ewa, riddle, 20, True, 2000, time_seconds=30)
    return anna, jan, ewa


class TestLeaderboard:

    def test_total_score(self, session, players):
        anna, jan, _ = players
        entries = get_leaderboard(session, days=7, now=NOW)

        assert [e.display_name for e in entries] == ["Anna", "Jan"]
        assert [e.rank for e in entries] == [1, 2]
        assert entries[0].total_points == 1500
        assert entries[0].games_played == 2
        assert entries[0].correct_answers == 1
        assert entries[0].accuracy == pytest.approx(0.5)
        assert entries[0].average_time_seconds == pytest.approx(90)

    def test_window_includes_older_answers(self, session, players):
        entries = get_leaderboard(session, days=30, now=NOW)
        assert entries[0].display_name == "Ewa"
        assert len(entries) == 3

    def test_accuracy(self, session, players):
        entries = get_leaderboard(session, days=30, category=LeaderboardCategory.ACCURACY, now=NOW)
        # Jan and Ewa are both at 100%, Jan has more correct answers
        assert [e.display_name for e in entries] == ["Jan", "Ewa", "Anna"]

    def test_games_played(self, session, players):
        entries = get_leaderboard(session, days=7, category=LeaderboardCategory.GAMES_PLAYED, now=NOW)
        assert [e.display_name for e in entries] == ["Jan", "Anna"]

    def test_average_time(self, session, players):
        entries = get_leaderboard(session, days=30, category=LeaderboardCategory.AVERAGE_TIME, now=NOW)
        assert [e.display_name for e in entries] == ["Ewa", "Anna", "Jan"]

    def test_count_is_clamped(self, session, players):
        assert len(get_leaderboard(session, days=30, count=0, now=NOW)) == 1
        assert len(get_leaderboard(session, days=30, count=1000, now=NOW)) == 3

    def test_unanswered_assignments_are_ignored(self, session, make_user, make_riddle):
        user = make_user()
        riddle = make_riddle()
        session.add(RiddleAssignment(
            user_id=user.id, riddle_id=riddle.id, game_day=NOW.date(), assigned_at=NOW
        ))
        session.commit()

        assert get_leaderboard(session, now=NOW) == []


class TestUserRank:

    def test_rank_of_ranked_user(self, session, players):
        _, jan, _ = players
        rank = get_user_rank(session, jan.id, days=7, now=NOW)

        assert rank.rank == 2
        assert rank.total_users == 2
        assert rank.total_points == 900
        assert rank.games_played == 3

    def test_user_outside_window_has_no_rank(self, session, players):
        _, _, ewa = players
        rank = get_user_rank(session, ewa.id, days=7, now=NOW)

        assert rank.rank is None
        assert rank.total_users == 2
        assert rank.total_points == 0
        assert rank.accuracy is None

    def test_days_are_clamped(self, session, players):
        anna, _, _ = players
        assert get_user_rank(session, anna.id, days=100_000, now=NOW).days == 3650


class TestUserStats:

    def test_summary_and_streaks(self, session, make_user, make_riddle, answered):
        user = make_user()
        riddle = make_riddle()
        # Oldest first: correct, correct, wrong, correct
        answered(user, riddle, 4, True, 800, distance=20.0)
        answered(user, riddle, 3, True, 600, distance=40.0)
        answered(user, riddle, 2, False, 100, distance=900.0)
        answered(user, riddle, 1, True, 400, distance=40.0)
        session.add(RiddleAssignment(
            user_id=user.id, riddle_id=riddle.id, game_day=NOW.date(), assigned_at=NOW
        ))
        session.commit()

        stats = get_user_stats(session, user)

        assert stats.assigned == 5
        assert stats.answered == 4
        assert stats.correct == 3
        assert stats.incorrect == 1
        assert stats.total_score == 1800
        assert stats.avg_score == pytest.approx(600)
        assert stats.best_streak == 2
        assert stats.current_streak == 1
        assert stats.total_distance_meters == pytest.approx(1000.0)
        assert stats.avg_distance_meters == pytest.approx(250.0)

    def test_new_user(self, session, make_user):
        stats = get_user_stats(session, make_user())
        assert stats.assigned == 0
        assert stats.avg_score == 0.0
        assert stats.best_streak == 0

    def test_history_is_newest_first(self, session, make_user, make_riddle, answered):
        user = make_user()
        riddle = make_riddle()
        older = answered(user, riddle, 3, False, 100)
        newer = answered(user, riddle, 1, True, 700)

        history = get_user_history(session, user.id)

        assert [h.id for h in history] == [newer.id, older.id]
        assert history[0].location_name == "Test location"
        assert history[0].is_correct is True
        assert history[1].points == 100

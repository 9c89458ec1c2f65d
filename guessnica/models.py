import enum
import uuid
from datetime import date, datetime, timezone
from typing import Optional
from pydantic import field_validator
from sqlalchemy import Index, UniqueConstraint
from sqlmodel import SQLModel, Field, Relationship


class RiddleDifficulty(enum.IntEnum):
    EASY = 1
    MEDIUM = 2
    HARD = 3


class User(SQLModel, table=True):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    display_name: str = Field(index=True, unique=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Location(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    latitude: float
    longitude: float
    image_url: str
    short_description: Optional[str] = Field(default=None, max_length=200)

    riddles: list["Riddle"] = Relationship(back_populates="location")


class Riddle(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    description: str
    difficulty: RiddleDifficulty = RiddleDifficulty.EASY
    time_limit_seconds: int
    max_distance_meters: int
    location_id: int = Field(foreign_key="location.id", index=True)

    location: Optional[Location] = Relationship(back_populates="riddles")


class RiddleAssignment(SQLModel, table=True):
    """A riddle handed to a user for one game-day.

    The answer columns are written together, once, by a conditional update;
    a row is either fully unanswered or fully answered.
    """

    __table_args__ = (
        UniqueConstraint("user_id", "game_day", name="riddleassignment_unique_user_game_day"),
        Index("ix_riddleassignment_user_assigned_at", "user_id", "assigned_at"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="user.id")
    riddle_id: int = Field(foreign_key="riddle.id", index=True)
    # Date on which the game-day window of this assignment starts
    game_day: date
    assigned_at: datetime

    answered_at: Optional[datetime] = None
    is_correct: Optional[bool] = None
    distance_meters: Optional[float] = None
    time_seconds: Optional[int] = None
    points: Optional[int] = None
    submitted_latitude: Optional[float] = None
    submitted_longitude: Optional[float] = None

    riddle: Optional[Riddle] = Relationship()

    @property
    def is_answered(self) -> bool:
        return self.answered_at is not None


# --- Pydantic request/response schemas ---

class UserCreate(SQLModel):
    display_name: str = Field(min_length=1, max_length=50)

    @field_validator("display_name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value


class UserResponse(SQLModel):
    id: str
    display_name: str


class UserStatsSummary(SQLModel):
    assigned: int = 0
    answered: int = 0
    correct: int = 0
    incorrect: int = 0
    total_score: int = 0
    avg_score: float = 0.0
    current_streak: int = 0
    best_streak: int = 0
    total_distance_meters: float = 0.0
    avg_distance_meters: float = 0.0
    account_created_at: datetime


class UserHistoryEntry(SQLModel):
    id: int
    riddle_id: int
    answered_at: datetime
    is_correct: bool
    points: int
    distance_meters: Optional[float] = None
    time_seconds: Optional[int] = None
    location_name: Optional[str] = None


class LocationCreate(SQLModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    image_url: str = Field(min_length=1)
    short_description: Optional[str] = Field(default=None, max_length=200)


class LocationUpdate(LocationCreate):
    pass


class LocationResponse(SQLModel):
    id: int
    latitude: float
    longitude: float
    image_url: str
    short_description: Optional[str] = None


class RiddleCreate(SQLModel):
    description: str = Field(min_length=1)
    difficulty: int = Field(ge=1, le=3)
    time_limit_seconds: int = Field(gt=0)
    max_distance_meters: int = Field(gt=0)
    location_id: int


class RiddleUpdate(RiddleCreate):
    pass


class RiddleResponse(SQLModel):
    id: int
    description: str
    difficulty: int
    location_id: int
    latitude: float
    longitude: float
    image_url: str
    short_description: Optional[str] = None
    time_limit_seconds: int
    max_distance_meters: int


class DailyRiddleResponse(SQLModel):
    user_riddle_id: int
    riddle_id: int
    image_url: str
    short_description: Optional[str] = None
    description: str
    difficulty: int
    time_limit_seconds: int
    max_distance_meters: int
    assigned_at: datetime
    is_answered: bool


class AnswerSubmit(SQLModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class AnswerResult(SQLModel):
    points: int
    distance_meters: float
    time_seconds: int
    is_correct: bool


class LeaderboardCategory(str, enum.Enum):
    TOTAL_SCORE = "total_score"
    ACCURACY = "accuracy"
    GAMES_PLAYED = "games_played"
    AVERAGE_TIME = "average_time"


class LeaderboardEntry(SQLModel):
    rank: int
    user_id: str
    display_name: str
    total_points: int
    correct_answers: int
    games_played: int
    average_time_seconds: Optional[float] = None
    accuracy: Optional[float] = None


class LeaderboardResponse(SQLModel):
    days: int
    category: LeaderboardCategory
    entries: list[LeaderboardEntry]


class UserRank(SQLModel):
    rank: Optional[int] = None
    total_users: int
    days: int
    category: LeaderboardCategory
    total_points: int = 0
    correct_answers: int = 0
    games_played: int = 0
    average_time_seconds: Optional[float] = None
    accuracy: Optional[float] = None

from fastapi import APIRouter, Depends
from sqlmodel import Session, select
from guessnica.database import get_session
from guessnica.dependencies import get_current_user
from guessnica.models import User, UserCreate, UserResponse, UserStatsSummary, UserHistoryEntry
from guessnica.stats import get_user_stats, get_user_history

router = APIRouter(prefix="/api/user", tags=["user"])


@router.post("/register", response_model=UserResponse)
def register_user(data: UserCreate, session: Session = Depends(get_session)):
    """Names are stripped and unique; registering a taken name returns its owner."""
    user = session.exec(select(User).where(User.display_name == data.display_name)).first()
    if user is None:
        user = User(display_name=data.display_name)
        session.add(user)
        session.commit()
        session.refresh(user)
    return UserResponse(id=user.id, display_name=user.display_name)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user: User = Depends(get_current_user)):
    """Get user by ID."""
    return UserResponse(id=user.id, display_name=user.display_name)


@router.get("/{user_id}/stats", response_model=UserStatsSummary)
def get_stats(user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    """Answer counts, score and streaks over the user's whole history."""
    return get_user_stats(session, user)


@router.get("/{user_id}/history", response_model=list[UserHistoryEntry])
def get_history(user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    """Answered riddles, newest first."""
    return get_user_history(session, user.id)

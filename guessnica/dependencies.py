from typing import Optional
from fastapi import Depends, Header, HTTPException
from sqlmodel import Session
from guessnica.config import get_settings
from guessnica.database import get_session
from guessnica.models import User

settings = get_settings()


def get_current_user(user_id: str, session: Session = Depends(get_session)) -> User:
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def require_admin(x_admin_token: Optional[str] = Header(None)):
    if x_admin_token != settings.admin_token:
        raise HTTPException(status_code=403, detail="Invalid admin token")

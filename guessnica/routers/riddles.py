from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from guessnica.database import get_session
from guessnica.dependencies import require_admin
from guessnica.models import (
    Location, Riddle, RiddleAssignment, RiddleDifficulty,
    RiddleCreate, RiddleUpdate, RiddleResponse,
)

router = APIRouter(prefix="/api/riddles", tags=["riddles"], dependencies=[Depends(require_admin)])


def _to_response(riddle: Riddle) -> RiddleResponse:
    location = riddle.location
    return RiddleResponse(
        id=riddle.id,
        description=riddle.description,
        difficulty=int(riddle.difficulty),
        location_id=riddle.location_id,
        latitude=location.latitude,
        longitude=location.longitude,
        image_url=location.image_url,
        short_description=location.short_description,
        time_limit_seconds=riddle.time_limit_seconds,
        max_distance_meters=riddle.max_distance_meters,
    )


def _get_or_404(session: Session, riddle_id: int) -> Riddle:
    riddle = session.get(Riddle, riddle_id)
    if not riddle:
        raise HTTPException(status_code=404, detail=f"Riddle with id {riddle_id} not found")
    return riddle


def _check_location(session: Session, location_id: int):
    if not session.get(Location, location_id):
        raise HTTPException(status_code=400, detail="Location not found")


@router.get("", response_model=list[RiddleResponse])
def list_riddles(session: Session = Depends(get_session)):
    riddles = session.exec(select(Riddle).order_by(Riddle.id)).all()
    return [_to_response(r) for r in riddles]


@router.get("/{riddle_id}", response_model=RiddleResponse)
def get_riddle(riddle_id: int, session: Session = Depends(get_session)):
    return _to_response(_get_or_404(session, riddle_id))


@router.post("", response_model=RiddleResponse, status_code=201)
def create_riddle(data: RiddleCreate, session: Session = Depends(get_session)):
    _check_location(session, data.location_id)

    riddle = Riddle(
        description=data.description,
        difficulty=RiddleDifficulty(data.difficulty),
        time_limit_seconds=data.time_limit_seconds,
        max_distance_meters=data.max_distance_meters,
        location_id=data.location_id,
    )
    session.add(riddle)
    session.commit()
    session.refresh(riddle)
    return _to_response(riddle)


@router.put("/{riddle_id}", response_model=RiddleResponse)
def update_riddle(riddle_id: int, data: RiddleUpdate, session: Session = Depends(get_session)):
    riddle = _get_or_404(session, riddle_id)
    _check_location(session, data.location_id)

    riddle.description = data.description
    riddle.difficulty = RiddleDifficulty(data.difficulty)
    riddle.time_limit_seconds = data.time_limit_seconds
    riddle.max_distance_meters = data.max_distance_meters
    riddle.location_id = data.location_id
    session.add(riddle)
    session.commit()
    session.refresh(riddle)
    return _to_response(riddle)


@router.delete("/{riddle_id}")
def delete_riddle(riddle_id: int, session: Session = Depends(get_session)):
    riddle = _get_or_404(session, riddle_id)

    in_use = session.exec(select(RiddleAssignment).where(RiddleAssignment.riddle_id == riddle_id)).first()
    if in_use:
        raise HTTPException(status_code=409, detail="Riddle has already been assigned")

    session.delete(riddle)
    session.commit()
    return {"message": "Riddle deleted", "id": riddle_id}

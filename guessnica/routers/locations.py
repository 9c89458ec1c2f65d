from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from guessnica.database import get_session
from guessnica.dependencies import require_admin
from guessnica.models import Location, Riddle, LocationCreate, LocationUpdate, LocationResponse

router = APIRouter(prefix="/api/locations", tags=["locations"])


def _get_or_404(session: Session, location_id: int) -> Location:
    location = session.get(Location, location_id)
    if not location:
        raise HTTPException(status_code=404, detail=f"Location with id {location_id} not found")
    return location


@router.get("", response_model=list[LocationResponse])
def list_locations(session: Session = Depends(get_session)):
    return session.exec(select(Location).order_by(Location.id)).all()


@router.get("/{location_id}", response_model=LocationResponse)
def get_location(location_id: int, session: Session = Depends(get_session)):
    return _get_or_404(session, location_id)


@router.post("", response_model=LocationResponse, status_code=201, dependencies=[Depends(require_admin)])
def create_location(data: LocationCreate, session: Session = Depends(get_session)):
    location = Location.model_validate(data)
    session.add(location)
    session.commit()
    session.refresh(location)
    return location


@router.put("/{location_id}", response_model=LocationResponse, dependencies=[Depends(require_admin)])
def update_location(location_id: int, data: LocationUpdate, session: Session = Depends(get_session)):
    location = _get_or_404(session, location_id)
    location.sqlmodel_update(data.model_dump())
    session.add(location)
    session.commit()
    session.refresh(location)
    return location


@router.delete("/{location_id}", dependencies=[Depends(require_admin)])
def delete_location(location_id: int, session: Session = Depends(get_session)):
    location = _get_or_404(session, location_id)

    in_use = session.exec(select(Riddle).where(Riddle.location_id == location_id)).first()
    if in_use:
        raise HTTPException(status_code=409, detail="Location is used by a riddle")

    session.delete(location)
    session.commit()
    return {"message": "Location deleted", "id": location_id}

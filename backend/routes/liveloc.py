# backend/routes/liveloc.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from database import get_db
from models.users import User
from models.guard import Guard
from models.location import LiveLocation
from schemas.location import LiveLocationUpdate, LiveLocationResponse, LiveLocationWithGuard
from utils.accounts import get_guard_or_404
from utils.api_error import ApiError
from utils.api_response import api_response
from utils.tokenJWT import require_admin, verify_jwt, verify_jwt_guard

router = APIRouter(tags=["Live location"])


# Guard reports its current position, one row per guard is kept up to date
@router.post("")
def update_live_location(
    payload: LiveLocationUpdate,
    current_guard: Guard = Depends(verify_jwt_guard),
    db: Session = Depends(get_db),
):
    live = db.query(LiveLocation).filter(LiveLocation.guard_id == current_guard.id).first()
    if live is None:
        live = LiveLocation(guard_id=current_guard.id, latitude=payload.latitude, longitude=payload.longitude)
        db.add(live)
    else:
        live.latitude = payload.latitude
        live.longitude = payload.longitude
    db.commit()
    db.refresh(live)

    return api_response(200, LiveLocationResponse.model_validate(live), "Live location updated")


@router.get("")
def list_live_locations(db: Session = Depends(get_db), _: User = Depends(require_admin)):
    rows = db.query(LiveLocation).options(joinedload(LiveLocation.guard)).order_by(LiveLocation.id).all()
    return api_response(200, [LiveLocationWithGuard.model_validate(r) for r in rows], "Live locations retrieved successfully")


@router.get("/{guard_id}")
def get_live_location(guard_id: str, db: Session = Depends(get_db), _: User = Depends(verify_jwt)):
    guard = get_guard_or_404(db, guard_id)
    live = db.query(LiveLocation).filter(LiveLocation.guard_id == guard.id).first()
    if live is None:
        raise ApiError(404, "Live location not found")

    return api_response(200, LiveLocationResponse.model_validate(live), "Live location retrieved successfully")

# backend/routes/location.py
from fastapi import APIRouter, Depends, Path, Request
from sqlalchemy.orm import Session, joinedload

from database import MAX_ROW_ID, get_db
from models.users import User
from models.location import Location
from schemas.location import LocationCreate, LocationUpdate, LocationResponse, DeployedLocation
from utils.accounts import get_guard_or_404
from utils.api_error import ApiError
from utils.api_response import api_response
from utils.audit import write_log, client_ip
from utils.tokenJWT import USER_KIND, require_admin

router = APIRouter(tags=["Location"])


# Assign a guard to a post
@router.post("")
def assign_location(
    payload: LocationCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    guard = get_guard_or_404(db, payload.guard_id)

    existing = db.query(Location).filter(Location.guard_id == guard.id).first()
    if existing:
        raise ApiError(409, "Guard already assigned to a location")

    location = Location(
        guard_id=guard.id,
        latitude=payload.latitude,
        longitude=payload.longitude,
        address=payload.address,
    )
    db.add(location)
    db.commit()
    db.refresh(location)

    write_log(db, actor_kind=USER_KIND, actor_id=current_user.id, action="ASSIGN", resource="location",
              ip=client_ip(request), meta={"guard_id": guard.id, "location_id": location.id})

    return api_response(201, LocationResponse.model_validate(location), "Guard assigned successfully")


@router.get("")
def list_locations(db: Session = Depends(get_db), _: User = Depends(require_admin)):
    locations = db.query(Location).options(joinedload(Location.guard)).order_by(Location.id).all()
    return api_response(200, [DeployedLocation.model_validate(loc) for loc in locations], "Locations retrieved successfully")


# Move an existing post
@router.put("/{location_id}")
def update_location(
    payload: LocationUpdate,
    location_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    location = db.get(Location, location_id)
    if not location:
        raise ApiError(404, "Location not found")

    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(location, key, value)
    db.commit()
    db.refresh(location)

    return api_response(200, LocationResponse.model_validate(location), "Location updated successfully")

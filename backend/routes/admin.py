# backend/routes/admin.py
from fastapi import APIRouter, Depends, Path, Query, Request
from typing import List, Optional, Literal
from sqlalchemy.orm import Session, joinedload
from pydantic import BaseModel

from database import MAX_ROW_ID, get_db
from models.users import User
from models.guard import Guard
from models.location import Location
from models.feedback import Complain, Appreciation
from schemas.user import CamelModel, UserResponse
from schemas.guard import GuardResponse, ApprovalUpdate
from schemas.location import DeployedLocation
from schemas.feedback import ComplainWithGuard, AppreciationWithGuard
from utils.accounts import get_guard_or_404
from utils.api_error import ApiError
from utils.api_response import api_response
from utils.audit import write_log, client_ip
from utils.tokenJWT import USER_KIND, require_admin

router = APIRouter(tags=["Admin"], dependencies=[Depends(require_admin)])


# Schema for paginated user list response
class PaginatedUsersResponse(CamelModel):
    items: List[UserResponse]
    total: int
    page: int
    page_size: int


class RoleUpdate(BaseModel):
    role: Literal["user", "admin"]


# Guards currently approved for duty
@router.get("/guards/approved")
def list_approved_guards(db: Session = Depends(get_db)):
    guards = db.query(Guard).filter(Guard.is_approved.is_(True)).order_by(Guard.id).all()
    if not guards:
        raise ApiError(404, "No authorised guards found")

    return api_response(200, [GuardResponse.model_validate(g) for g in guards], "Authorised guards retrieved successfully")


# Guards without any assigned post (left join, no matching location row)
@router.get("/guards/unassigned")
def list_unassigned_guards(db: Session = Depends(get_db)):
    guards = (
        db.query(Guard)
        .outerjoin(Location, Location.guard_id == Guard.id)
        .filter(Location.id.is_(None))
        .order_by(Guard.id)
        .all()
    )
    if not guards:
        raise ApiError(404, "No unassigned guards found")

    return api_response(200, [GuardResponse.model_validate(g) for g in guards], "Unassigned guards retrieved successfully")


# Posts staffed by an approved guard, each with the guard's details
@router.get("/guards/deployed")
def list_deployed_guards(db: Session = Depends(get_db)):
    locations = (
        db.query(Location)
        .join(Guard, Location.guard_id == Guard.id)
        .filter(Guard.is_approved.is_(True))
        .options(joinedload(Location.guard))
        .order_by(Location.id)
        .all()
    )
    if not locations:
        raise ApiError(404, "No authorised guards found")

    return api_response(200, [DeployedLocation.model_validate(loc) for loc in locations], "Authorised guards retrieved successfully")


# Set or toggle a guard's approval flag
@router.patch("/guards/{guard_id}/approval")
def update_guard_approval(
    guard_id: str,
    request: Request,
    payload: Optional[ApprovalUpdate] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    guard = get_guard_or_404(db, guard_id)

    if payload is not None and payload.is_approved is not None:
        guard.is_approved = payload.is_approved
    else:
        guard.is_approved = not guard.is_approved
    db.commit()
    db.refresh(guard)

    write_log(db, actor_kind=USER_KIND, actor_id=current_user.id, action="APPROVAL", resource="guard",
              ip=client_ip(request), meta={"guard_id": guard.id, "is_approved": guard.is_approved})

    message = "Guard approved" if guard.is_approved else "Guard approval revoked"
    return api_response(200, GuardResponse.model_validate(guard), message)


@router.get("/complaints")
def list_complaints(guard_id: Optional[int] = Query(None, ge=1, le=MAX_ROW_ID, alias="guardId"), db: Session = Depends(get_db)):
    query = db.query(Complain).options(joinedload(Complain.guard))
    if guard_id is not None:
        query = query.filter(Complain.guard_id == guard_id)
    complaints = query.order_by(Complain.created_at.desc(), Complain.id.desc()).all()

    return api_response(200, [ComplainWithGuard.model_validate(c) for c in complaints], "Complaints retrieved successfully")


@router.get("/appreciations")
def list_appreciations(guard_id: Optional[int] = Query(None, ge=1, le=MAX_ROW_ID, alias="guardId"), db: Session = Depends(get_db)):
    query = db.query(Appreciation).options(joinedload(Appreciation.guard))
    if guard_id is not None:
        query = query.filter(Appreciation.guard_id == guard_id)
    appreciations = query.order_by(Appreciation.created_at.desc(), Appreciation.id.desc()).all()

    return api_response(200, [AppreciationWithGuard.model_validate(a) for a in appreciations], "Appreciations retrieved successfully")


# Retrieve a list of users with filtering, sorting, and pagination
@router.get("/users")
def get_all_users(
    q: Optional[str] = Query(None, description="Search by email or username"),
    role: Optional[str] = Query(None, description="Filter by role"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    sort_by: Literal["id", "email", "role", "user_name", "full_name"] = Query("id", alias="sortBy"),
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
):
    query = db.query(User)

    # Filter by email or username
    if q:
        like = f"%{q.lower()}%"
        query = query.filter(User.email.ilike(like) | User.user_name.ilike(like))

    # Filter by role
    if role:
        query = query.filter(User.role.ilike(role))

    # Apply sorting based on selected field and order
    sort_map = {
        "id": User.id,
        "email": User.email,
        "role": User.role,
        "user_name": User.user_name,
        "full_name": User.full_name,
    }
    col = sort_map.get(sort_by, User.id)
    query = query.order_by(col.asc() if order == "asc" else col.desc())

    # Apply pagination
    total = query.count()
    users = query.offset((page - 1) * page_size).limit(page_size).all()

    page_data = PaginatedUsersResponse(
        items=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=page,
        page_size=page_size,
    )
    return api_response(200, page_data, "Users retrieved successfully")


# Update user role
@router.put("/users/{user_id}/role")
def update_user_role(
    new_role: RoleUpdate,
    request: Request,
    user_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    user = db.get(User, user_id)
    if not user:
        raise ApiError(404, "User not found")

    # Prevent an admin from demoting themselves out of the admin area
    if user.id == current_user.id and new_role.role != "admin":
        raise ApiError(400, "You cannot change your own role")

    user.role = new_role.role
    db.commit()
    db.refresh(user)

    write_log(db, actor_kind=USER_KIND, actor_id=current_user.id, action="ROLE_UPDATE", resource="user",
              ip=client_ip(request), meta={"user_id": user.id, "role": user.role})

    return api_response(200, UserResponse.model_validate(user), f"User {user.user_name} role updated to {user.role}")

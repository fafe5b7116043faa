# backend/routes/guard.py
import json
import math
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from database import get_db
from models.guard import Guard
from models.location import Location
from schemas import guard as schemas
from schemas.user import LoginRequest, RefreshRequest, TokenPair
from schemas.location import LocationResponse
from utils.api_error import ApiError
from utils.accounts import find_account, upload_avatar, validation_message
from utils.api_response import api_response, status_response
from utils.audit import write_log, client_ip
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import (
    GUARD_KIND, issue_tokens, rotate_refresh_token, read_refresh_token,
    set_auth_cookies, clear_auth_cookies, verify_jwt_guard,
)

router = APIRouter(tags=["Guard"])


def parse_work_history(raw: Optional[str]) -> list:
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except ValueError:
        parsed = None
    if not isinstance(parsed, list):
        raise ApiError(400, "Invalid workHistory format. Must be a JSON array.")
    return parsed


# Register a new guard (multipart, with avatar upload)
@router.post("/register")
async def register_guard(
    request: Request,
    user_name: Optional[str] = Form(None, alias="userName"),
    full_name: Optional[str] = Form(None, alias="fullName"),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    residence: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    age: Optional[str] = Form(None),
    work_history: Optional[str] = Form(None, alias="workHistory"),
    avatar: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
):
    required = (user_name, full_name, email, password, residence, description, age)
    if not all(v and v.strip() for v in required):
        raise ApiError(400, "All fields are required")

    history = parse_work_history(work_history)
    try:
        payload = schemas.GuardCreate(
            user_name=user_name, full_name=full_name, email=email, password=password,
            residence=residence, description=description, age=age, work_history=history,
        )
    except ValidationError as e:
        raise ApiError(400, validation_message(e))

    if find_account(db, Guard, user_name=payload.user_name, email=payload.email):
        write_log(db, actor_kind=GUARD_KIND, actor_id=None, action="REGISTER", resource="guard",
                  status="FAIL", ip=client_ip(request), meta={"email": payload.email, "reason": "exists"})
        raise ApiError(409, "Guard already exists")

    avatar_url = await upload_avatar(avatar)

    guard = Guard(
        user_name=payload.user_name,
        full_name=payload.full_name,
        email=payload.email.lower(),
        password_hash=get_password_hash(payload.password),
        avatar=avatar_url,
        residence=payload.residence,
        description=payload.description,
        age=payload.age,
        work_history=payload.work_history,
    )
    db.add(guard)
    db.commit()
    db.refresh(guard)

    write_log(db, actor_kind=GUARD_KIND, actor_id=guard.id, action="REGISTER", resource="guard",
              ip=client_ip(request), meta={"email": guard.email})

    return api_response(201, schemas.GuardResponse.model_validate(guard), "Guard registered successfully")


@router.post("/login")
def login_guard(payload: LoginRequest, request: Request, db: Session = Depends(get_db)):
    if not payload.email and not payload.user_name:
        raise ApiError(400, "Provide either username or email")

    guard = find_account(db, Guard, user_name=payload.user_name, email=payload.email)
    if not guard:
        raise ApiError(404, "Guard not found")

    if not verify_password(payload.password, guard.password_hash):
        write_log(db, actor_kind=GUARD_KIND, actor_id=guard.id, action="LOGIN", resource="guard",
                  status="FAIL", ip=client_ip(request))
        raise ApiError(401, "Invalid credentials")

    access_token, refresh_token = issue_tokens(db, guard, GUARD_KIND)
    write_log(db, actor_kind=GUARD_KIND, actor_id=guard.id, action="LOGIN", resource="guard", ip=client_ip(request))

    response = api_response(
        200,
        {"guard": schemas.GuardResponse.model_validate(guard), "accessToken": access_token, "refreshToken": refresh_token},
        "Login successful",
    )
    set_auth_cookies(response, access_token, refresh_token)
    return response


@router.post("/logout")
def logout_guard(request: Request, current_guard: Guard = Depends(verify_jwt_guard), db: Session = Depends(get_db)):
    current_guard.refresh_token = None
    db.commit()
    write_log(db, actor_kind=GUARD_KIND, actor_id=current_guard.id, action="LOGOUT", resource="guard",
              ip=client_ip(request))

    response = api_response(200, {}, "Guard logged out")
    clear_auth_cookies(response)
    return response


@router.post("/refresh-tokens")
def refresh_guard_tokens(
    request: Request,
    payload: Optional[RefreshRequest] = None,
    db: Session = Depends(get_db),
):
    incoming = read_refresh_token(request, payload.refresh_token if payload else None)
    guard, access_token, refresh_token = rotate_refresh_token(db, Guard, GUARD_KIND, incoming)

    response = api_response(
        200,
        TokenPair(access_token=access_token, refresh_token=refresh_token),
        "Access token refreshed successfully",
    )
    set_auth_cookies(response, access_token, refresh_token)
    return response


@router.get("/current-guard")
def get_current_guard(current_guard: Guard = Depends(verify_jwt_guard)):
    return api_response(200, schemas.GuardResponse.model_validate(current_guard), "Current guard retrieved successfully")


@router.get("/check-refresh")
def check_refresh_token(request: Request):
    return status_response(200 if read_refresh_token(request) else 401)


# Posts the logged-in guard is deployed to
@router.get("/assignment")
def get_assignment(current_guard: Guard = Depends(verify_jwt_guard), db: Session = Depends(get_db)):
    deployment = db.query(Location).filter(Location.guard_id == current_guard.id).order_by(Location.id).all()
    if not deployment:
        raise ApiError(404, "Deployment not found")

    return api_response(200, [LocationResponse.model_validate(loc) for loc in deployment], "Found deployment")


@router.patch("/work-percent")
def update_work_percent(
    payload: schemas.WorkPercentUpdate,
    current_guard: Guard = Depends(verify_jwt_guard),
    db: Session = Depends(get_db),
):
    value = payload.work_percent
    if value is None or not math.isfinite(value) or value < 0 or value > 100:
        raise ApiError(400, "Invalid work percent value (must be between 0-100)")

    current_guard.work_percent = value
    db.commit()
    db.refresh(current_guard)

    return api_response(200, schemas.GuardResponse.model_validate(current_guard), "Work percent updated successfully")


# Public profile lookup, must stay the last route of this router
@router.get("/{user_name}")
def get_guard(user_name: str, db: Session = Depends(get_db)):
    name = user_name.strip().lower()
    if not name:
        raise ApiError(400, "Username is required")

    guard = db.query(Guard).filter(Guard.user_name == name).first()
    if not guard:
        raise ApiError(404, "Guard not found")

    return api_response(200, schemas.GuardResponse.model_validate(guard), "Guard retrieved successfully")

# backend/routes/user.py
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.users import User
from models.feedback import Complain, Appreciation
from schemas import user as schemas
from schemas.guard import GuardResponse
from schemas.feedback import ComplainCreate, AppreciationCreate, AppreciationResponse
from utils.api_error import ApiError
from utils.accounts import find_account, get_guard_or_404, upload_avatar, validation_message
from utils.api_response import api_response, status_response
from utils.audit import write_log, client_ip
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import (
    USER_KIND, issue_tokens, rotate_refresh_token, read_refresh_token,
    set_auth_cookies, clear_auth_cookies, verify_jwt,
)

router = APIRouter(tags=["User"])


# Register a new user (multipart, with avatar upload)
@router.post("/register")
async def register_user(
    request: Request,
    user_name: Optional[str] = Form(None, alias="userName"),
    full_name: Optional[str] = Form(None, alias="fullName"),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    role: str = Form("user"),  # "admin" is accepted unless ALLOW_ADMIN_SIGNUP is off
    avatar: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
):
    if not all(v and v.strip() for v in (user_name, full_name, email, password)):
        raise ApiError(400, "All fields are required")

    try:
        payload = schemas.UserCreate(user_name=user_name, full_name=full_name, email=email,
                                     password=password, role=role or "user")
    except ValidationError as e:
        raise ApiError(400, validation_message(e))

    if payload.role == "admin" and not settings.ALLOW_ADMIN_SIGNUP:
        raise ApiError(403, "Admin registration is disabled")

    if find_account(db, User, user_name=payload.user_name, email=payload.email):
        write_log(db, actor_kind=USER_KIND, actor_id=None, action="REGISTER", resource="user",
                  status="FAIL", ip=client_ip(request), meta={"email": payload.email, "reason": "exists"})
        raise ApiError(409, "User already exists")

    avatar_url = await upload_avatar(avatar)

    new_user = User(
        user_name=payload.user_name,
        full_name=payload.full_name,
        email=payload.email.lower(),
        password_hash=get_password_hash(payload.password),
        avatar=avatar_url,
        role=payload.role,
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    write_log(db, actor_kind=USER_KIND, actor_id=new_user.id, action="REGISTER", resource="user",
              ip=client_ip(request), meta={"email": new_user.email})

    return api_response(201, schemas.UserResponse.model_validate(new_user), "User registered successfully")


# Authenticate user and issue JWT cookies
@router.post("/login")
def login_user(payload: schemas.LoginRequest, request: Request, db: Session = Depends(get_db)):
    if not payload.email and not payload.user_name:
        raise ApiError(400, "Provide either username or email")

    user = find_account(db, User, user_name=payload.user_name, email=payload.email)
    if not user:
        raise ApiError(404, "User not found")

    if not verify_password(payload.password, user.password_hash):
        write_log(db, actor_kind=USER_KIND, actor_id=user.id, action="LOGIN", resource="user",
                  status="FAIL", ip=client_ip(request))
        raise ApiError(401, "Invalid credentials")

    access_token, refresh_token = issue_tokens(db, user, USER_KIND)
    write_log(db, actor_kind=USER_KIND, actor_id=user.id, action="LOGIN", resource="user", ip=client_ip(request))

    response = api_response(
        200,
        {"user": schemas.UserResponse.model_validate(user), "accessToken": access_token, "refreshToken": refresh_token},
        "Login successful",
    )
    set_auth_cookies(response, access_token, refresh_token)
    return response


# Revoke the stored refresh token and drop both cookies
@router.post("/logout")
def logout_user(request: Request, current_user: User = Depends(verify_jwt), db: Session = Depends(get_db)):
    current_user.refresh_token = None
    db.commit()
    write_log(db, actor_kind=USER_KIND, actor_id=current_user.id, action="LOGOUT", resource="user", ip=client_ip(request))

    response = api_response(200, {}, "User logged out")
    clear_auth_cookies(response)
    return response


# Exchange a valid refresh token for a new token pair
@router.post("/refresh-tokens")
def refresh_user_tokens(
    request: Request,
    payload: Optional[schemas.RefreshRequest] = None,
    db: Session = Depends(get_db),
):
    incoming = read_refresh_token(request, payload.refresh_token if payload else None)
    user, access_token, refresh_token = rotate_refresh_token(db, User, USER_KIND, incoming)

    response = api_response(
        200,
        schemas.TokenPair(access_token=access_token, refresh_token=refresh_token),
        "Access token refreshed successfully",
    )
    set_auth_cookies(response, access_token, refresh_token)
    return response


@router.get("/current-user")
def get_current_user(current_user: User = Depends(verify_jwt)):
    return api_response(200, schemas.UserResponse.model_validate(current_user), "Current user retrieved successfully")


# Lets the frontend decide whether a silent refresh is worth attempting
@router.get("/check-refresh")
def check_refresh_token(request: Request):
    status_code = 200 if read_refresh_token(request) else 401
    return status_response(status_code)


# File a complaint against a guard, this revokes the guard's approval
@router.post("/complain/{guard_id}")
def complain_guard(
    guard_id: str,
    payload: ComplainCreate,
    request: Request,
    current_user: User = Depends(verify_jwt),
    db: Session = Depends(get_db),
):
    if not payload.complain or not payload.complain.strip():
        raise ApiError(400, "You must provide feedback")

    guard = get_guard_or_404(db, guard_id)
    guard.is_approved = False
    db.add(Complain(complain=payload.complain.strip(), guard_id=guard.id, user_id=current_user.id))
    db.commit()
    db.refresh(guard)

    write_log(db, actor_kind=USER_KIND, actor_id=current_user.id, action="COMPLAIN", resource="guard",
              ip=client_ip(request), meta={"guard_id": guard.id})

    return api_response(200, GuardResponse.model_validate(guard), "Guard authorisation requested successfully")


# Leave an appreciation message for a guard
@router.post("/appreciate/{guard_id}")
def appreciate_guard(
    guard_id: str,
    payload: AppreciationCreate,
    request: Request,
    current_user: User = Depends(verify_jwt),
    db: Session = Depends(get_db),
):
    if not payload.message or not payload.message.strip():
        raise ApiError(400, "You must provide appreciation feedback")

    guard = get_guard_or_404(db, guard_id)
    appreciation = Appreciation(message=payload.message.strip(), guard_id=guard.id, user_id=current_user.id)
    db.add(appreciation)
    db.commit()
    db.refresh(appreciation)

    write_log(db, actor_kind=USER_KIND, actor_id=current_user.id, action="APPRECIATE", resource="guard",
              ip=client_ip(request), meta={"guard_id": guard.id})

    return api_response(200, AppreciationResponse.model_validate(appreciation), "Guard appreciated successfully")


# Public profile lookup, must stay the last route of this router
@router.get("/{user_name}")
def get_user(user_name: str, db: Session = Depends(get_db)):
    name = user_name.strip().lower()
    if not name:
        raise ApiError(400, "Username is required")

    user = db.query(User).filter(User.user_name == name).first()
    if not user:
        raise ApiError(404, "User not found")

    return api_response(200, schemas.UserResponse.model_validate(user), "User retrieved successfully")

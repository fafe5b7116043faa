# utils/tokenJWT.py
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from jose import jwt, JWTError
from fastapi import Depends, Request, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.users import User
from models.guard import Guard
from utils.api_error import ApiError

logger = logging.getLogger(__name__)

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

# Token "kind" claim, keeps a guard token from authenticating as a user with the same id
USER_KIND = "user"
GUARD_KIND = "guard"

# Authorization header is accepted as a fallback to the cookie
bearer_scheme = HTTPBearer(auto_error=False)


def _encode(payload: dict, secret: str, expires_delta: timedelta) -> str:
    to_encode = payload.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    # jti makes every issued token unique, even two issued within the same second
    to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})
    return jwt.encode(to_encode, secret, algorithm=settings.ALGORITHM)


# Generate a short-lived access token carrying the public identity of the account
def generate_access_token(entity, kind: str) -> str:
    return _encode(
        {
            "_id": entity.id,
            "email": entity.email,
            "userName": entity.user_name,
            "fullName": entity.full_name,
            "kind": kind,
        },
        settings.ACCESS_TOKEN_SECRET,
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


# Generate a long-lived refresh token, only the id is embedded
def generate_refresh_token(entity, kind: str) -> str:
    return _encode(
        {"_id": entity.id, "kind": kind},
        settings.REFRESH_TOKEN_SECRET,
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def decode_token(token: str, secret: str) -> Optional[dict]:
    try:
        return jwt.decode(token, secret, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def _load_subject(db: Session, model, kind: str, payload: Optional[dict]):
    if payload is None or payload.get("kind") != kind:
        return None
    subject_id = payload.get("_id")
    if not isinstance(subject_id, int):
        return None
    return db.get(model, subject_id)


def issue_tokens(db: Session, entity, kind: str) -> Tuple[str, str]:
    """Issue a fresh access/refresh pair and store the refresh token on the account.

    Storing the refresh token is what makes rotation work: only the most
    recently issued refresh token is accepted by the refresh endpoints.
    """
    access_token = generate_access_token(entity, kind)
    refresh_token = generate_refresh_token(entity, kind)
    entity.refresh_token = refresh_token
    db.commit()
    db.refresh(entity)
    return access_token, refresh_token


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": settings.COOKIE_SECURE,
        "samesite": settings.COOKIE_SAMESITE,
    }


def set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    options = _cookie_options()
    response.set_cookie(REFRESH_COOKIE, refresh_token, max_age=settings.refresh_cookie_max_age, **options)
    response.set_cookie(ACCESS_COOKIE, access_token, **options)


def clear_auth_cookies(response: Response) -> None:
    options = _cookie_options()
    response.delete_cookie(ACCESS_COOKIE, **options)
    response.delete_cookie(REFRESH_COOKIE, **options)


def read_refresh_token(request: Request, body_token: Optional[str] = None) -> Optional[str]:
    return request.cookies.get(REFRESH_COOKIE) or body_token


def rotate_refresh_token(db: Session, model, kind: str, incoming: Optional[str]) -> Tuple[object, str, str]:
    """Validate an incoming refresh token and rotate both tokens.

    Any failure after the token is found (bad signature, expiry, unknown
    account, token already rotated away) is reported as the same 401.
    """
    if not incoming:
        raise ApiError(401, "Unauthorized request")

    payload = decode_token(incoming, settings.REFRESH_TOKEN_SECRET)
    entity = _load_subject(db, model, kind, payload)

    if entity is None or entity.refresh_token != incoming:
        logger.info("Rejected refresh token for %s", kind)
        raise ApiError(401, "Invalid refresh token")

    access_token, refresh_token = issue_tokens(db, entity, kind)
    return entity, access_token, refresh_token


def _authenticate(request: Request, credentials: Optional[HTTPAuthorizationCredentials], db: Session, model, kind: str):
    token = request.cookies.get(ACCESS_COOKIE)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        raise ApiError(401, "Unauthorized request")

    payload = decode_token(token, settings.ACCESS_TOKEN_SECRET)
    entity = _load_subject(db, model, kind, payload)
    if entity is None:
        raise ApiError(401, "Invalid access token")
    return entity


# Retrieve the currently authenticated user from the access token
def verify_jwt(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    return _authenticate(request, credentials, db, User, USER_KIND)


# Retrieve the currently authenticated guard from the access token
def verify_jwt_guard(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Guard:
    return _authenticate(request, credentials, db, Guard, GUARD_KIND)


# Dependency factory for Role-Based Access Control
def role_required(*allowed_roles):
    def _checker(current_user: User = Depends(verify_jwt)):
        if allowed_roles and (current_user.role or "").lower() not in allowed_roles:
            raise ApiError(403, "Admin access required" if allowed_roles == ("admin",) else "Forbidden")
        return current_user
    return _checker


require_admin = role_required("admin")

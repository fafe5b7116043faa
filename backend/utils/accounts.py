# backend/utils/accounts.py
from typing import Optional

import httpx
from fastapi import UploadFile
from pydantic import ValidationError
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from database import MAX_ROW_ID
from models.guard import Guard
from utils.api_error import ApiError
from utils.cloudinary import media_client, stage_upload


def find_account(db: Session, model, *, user_name: Optional[str] = None, email: Optional[str] = None):
    # Match on either identifier, case-insensitively
    conditions = []
    if user_name:
        conditions.append(func.lower(model.user_name) == user_name.strip().lower())
    if email:
        conditions.append(func.lower(model.email) == email.strip().lower())
    if not conditions:
        return None
    return db.query(model).filter(or_(*conditions)).first()


def get_guard_or_404(db: Session, guard_id) -> Guard:
    # Malformed ids are reported the same way as unknown ones
    try:
        guard_pk = int(guard_id)
    except (TypeError, ValueError):
        guard_pk = 0
    guard = db.get(Guard, guard_pk) if 0 < guard_pk <= MAX_ROW_ID else None
    if guard is None:
        raise ApiError(404, "Guard not found")
    return guard


async def upload_avatar(avatar: Optional[UploadFile]) -> str:
    if avatar is None or not avatar.filename:
        raise ApiError(400, "Avatar image is required")

    local_path = stage_upload(avatar)
    try:
        uploaded = await media_client.upload_image(local_path, folder="avatars")
    except (httpx.RequestError, httpx.HTTPStatusError):
        raise ApiError(500, "Failed to upload avatar")

    url = (uploaded.get("url") or uploaded.get("secure_url")) if uploaded else None
    if not url:
        raise ApiError(500, "Failed to upload avatar")
    return url


def validation_message(exc: ValidationError) -> str:
    err = exc.errors()[0]
    field = ".".join(str(p) for p in err.get("loc", []))
    return f"Invalid value for '{field}': {err.get('msg')}"

# backend/routes/logs.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional, Any
from datetime import datetime
from pydantic import Field

from database import MAX_ROW_ID, get_db
from models.log import Log
from schemas.user import CamelModel
from utils.api_response import api_response
from utils.tokenJWT import require_admin

router = APIRouter(prefix="/logs", tags=["Logs"], dependencies=[Depends(require_admin)])

# --- SCHEMAS ---
class LogResponse(CamelModel):
    id: int = Field(serialization_alias="_id")
    actor_kind: Optional[str] = None
    actor_id: Optional[int] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    ts: datetime
    meta: Optional[Any] = None

class LogPage(CamelModel):
    items: List[LogResponse]
    total: int
    page: int
    page_size: int

# --- ENDPOINT ---
@router.get("")
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    action: Optional[str] = Query(None, description="Filter by action"),
    actor_kind: Optional[str] = Query(None, alias="actorKind", description="user or guard"),
    actor_id: Optional[int] = Query(None, ge=1, le=MAX_ROW_ID, alias="actorId"),
    resource: Optional[str] = Query(None, description="Filter by resource"),
    status: Optional[str] = Query(None, description="SUCCESS or FAIL"),
    date_from: Optional[str] = Query(None, alias="dateFrom", description="YYYY-MM-DD"),
    date_to: Optional[str] = Query(None, alias="dateTo", description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
):
    query = db.query(Log)

    if action:
        query = query.filter(Log.action.ilike(f"%{action}%"))

    if actor_kind:
        query = query.filter(Log.actor_kind == actor_kind)

    if actor_id is not None:
        query = query.filter(Log.actor_id == actor_id)

    if resource:
        query = query.filter(Log.resource.ilike(f"%{resource}%"))

    if status:
        query = query.filter(Log.status == status.upper())

    # Malformed dates are ignored
    if date_from:
        try:
            query = query.filter(Log.ts >= datetime.fromisoformat(date_from))
        except ValueError:
            pass

    if date_to:
        try:
            dt_to_str = date_to
            # Cover the whole end day
            if len(dt_to_str) == 10:
                dt_to_str += " 23:59:59"
            query = query.filter(Log.ts <= datetime.fromisoformat(dt_to_str))
        except ValueError:
            pass

    # Newest first
    query = query.order_by(Log.ts.desc(), Log.id.desc())

    total = query.count()
    logs = query.offset((page - 1) * page_size).limit(page_size).all()

    return api_response(
        200,
        LogPage(items=[LogResponse.model_validate(entry) for entry in logs], total=total, page=page, page_size=page_size),
        "Logs retrieved successfully",
    )

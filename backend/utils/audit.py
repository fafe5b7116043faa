from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session
from models.log import Log

def client_ip(request: Optional[Request]) -> Optional[str]:
    if request is None or request.client is None:
        return None
    return request.client.host

def write_log(db: Session, *, actor_kind, actor_id, action, resource, status="SUCCESS", ip=None, meta=None):
    entry = Log(actor_kind=actor_kind, actor_id=actor_id, action=action, resource=resource,
                status=status, ip=ip, meta=meta or {})
    db.add(entry)
    db.commit()

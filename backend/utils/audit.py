from fastapi import Request
from sqlalchemy.orm import Session
from models.log import Log, STATUS_SUCCESS

# Persist an audit entry; the caller's pending changes must already be committed
def write_log(db: Session, *, user_id, action, resource, status=STATUS_SUCCESS, request: Request = None, meta=None):
    ip = request.client.host if request is not None and request.client else None
    entry = Log(user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    db.add(entry)
    db.commit()

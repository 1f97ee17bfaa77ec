# backend/utils/audit.py
import logging
from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session
from models.log import AuditLog

logger = logging.getLogger(__name__)

def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None

def write_log(db: Session, *, action, resource, resource_id=None, status="SUCCESS", ip=None, meta=None):
    """Persists one audit row and mirrors it to the application log."""
    entry = AuditLog(
        action=action, resource=resource, resource_id=resource_id,
        status=status, ip=ip, meta=meta or {},
    )
    db.add(entry)
    db.commit()

    level = logging.INFO if status == "SUCCESS" else logging.WARNING
    logger.log(level, "%s %s#%s [%s] %s", action, resource, resource_id, status, meta or {})

# backend/routes/logs.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional, Any
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from database import get_db
from models.log import AuditLog

router = APIRouter(prefix="/logs", tags=["Logs"])

# --- SCHEMAS ---
class LogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    resource_id: Optional[int] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    ts: datetime
    meta: Optional[Any] = None

class LogPage(BaseModel):
    items: List[LogResponse]
    total: int
    page: int
    page_size: int

def _parse_day(value: str, end_of_day: bool = False) -> Optional[datetime]:
    # Bare YYYY-MM-DD covers the whole day when used as an upper bound
    if end_of_day and len(value) == 10:
        value += " 23:59:59"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None

# --- ENDPOINT ---
@router.get("", response_model=LogPage)
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Filter by action"),
    resource: Optional[str] = Query(None, description="Filter by resource"),
    resource_id: Optional[int] = Query(None, description="Filter by affected row id"),
    status: Optional[str] = Query(None, description="Filter by status (SUCCESS/FAIL)"),
    date_from: Optional[str] = Query(None, description="From date (YYYY-MM-DD)"),
    date_to: Optional[str] = Query(None, description="To date (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
):
    query = db.query(AuditLog)

    if action:
        query = query.filter(AuditLog.action.ilike(f"%{action}%"))
    if resource:
        query = query.filter(AuditLog.resource.ilike(f"%{resource}%"))
    if resource_id is not None:
        query = query.filter(AuditLog.resource_id == resource_id)
    if status:
        query = query.filter(AuditLog.status == status)

    # Malformed dates are ignored rather than rejected
    dt_from = _parse_day(date_from) if date_from else None
    if dt_from:
        query = query.filter(AuditLog.ts >= dt_from)
    dt_to = _parse_day(date_to, end_of_day=True) if date_to else None
    if dt_to:
        query = query.filter(AuditLog.ts <= dt_to)

    query = query.order_by(AuditLog.ts.desc(), AuditLog.id.desc())

    total = query.count()
    logs = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "items": logs,
        "total": total,
        "page": page,
        "page_size": page_size,
    }

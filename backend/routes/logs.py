# backend/routes/logs.py
from datetime import datetime, time
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from models.audit_log import AuditLog
from models.users import User
from schemas.common import ApiResponse, Page, ok, page_of
from schemas.log import LogResponse
from utils.tokenJWT import admin_required

router = APIRouter(prefix="/logs", tags=["Logs"])


@router.get("", response_model=ApiResponse[Page[LogResponse]])
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Filter by action"),
    user_id: Optional[int] = Query(None, description="Filter by user ID"),
    resource: Optional[str] = Query(None, description="Filter by resource"),
    status: Optional[str] = Query(None, description="Filter by status (SUCCESS/FAIL)"),
    date_from: Optional[str] = Query(None, description="From date (YYYY-MM-DD)"),
    date_to: Optional[str] = Query(None, description="To date (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    query = db.query(AuditLog)

    if action:
        query = query.filter(AuditLog.action.ilike(f"%{action}%"))
    if user_id is not None:
        query = query.filter(AuditLog.user_id == user_id)
    if resource:
        query = query.filter(AuditLog.resource.ilike(f"%{resource}%"))
    if status:
        query = query.filter(AuditLog.status == status)

    # Malformed dates are ignored rather than rejected
    if date_from:
        try:
            query = query.filter(AuditLog.ts >= datetime.fromisoformat(date_from))
        except ValueError:
            pass
    if date_to:
        try:
            dt_to = datetime.fromisoformat(date_to)
            # A bare date covers the whole day
            if len(date_to) == 10:
                dt_to = datetime.combine(dt_to.date(), time.max)
            query = query.filter(AuditLog.ts <= dt_to)
        except ValueError:
            pass

    query = query.order_by(AuditLog.ts.desc(), AuditLog.id.desc())
    total = query.count()
    logs = query.offset((page - 1) * page_size).limit(page_size).all()
    return ok(page_of(logs, total, page, page_size), "Logs fetched successfully")

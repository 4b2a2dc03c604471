import math
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import Identity, require_roles
from backend.core import config
from backend.database import get_db
from backend.models.audit_log import AuditLog
from backend.models.user import Role
from backend.routes.dependencies import database_unavailable
from backend.routes.schemas import PageMeta

router = APIRouter(tags=['audit'])


class AuditLogResponse(BaseModel):
    id: str
    user_id: str | None = None
    action: str
    resource: str
    resource_id: str | None = None
    before: Any = None
    after: Any = None
    correlation_id: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class AuditLogListResponse(BaseModel):
    data: list[AuditLogResponse]
    meta: PageMeta


@router.get('', response_model=AuditLogListResponse)
def list_audit_logs(
    action: str | None = Query(default=None),
    user_id: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=config.AUDIT_DEFAULT_PAGE_SIZE, ge=1),
    identity: Identity = Depends(require_roles(Role.ADMIN)),
    db: Session = Depends(get_db),
):
    limit = min(config.MAX_PAGE_SIZE, limit)
    filters = [AuditLog.tenant_id == identity.tenant_id]
    if action:
        filters.append(AuditLog.action == action)
    if user_id:
        filters.append(AuditLog.user_id == user_id)

    try:
        total = db.execute(select(func.count(AuditLog.id)).where(*filters)).scalar_one()
        logs = (
            db.query(AuditLog)
            .filter(*filters)
            .order_by(AuditLog.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return {
        'data': logs,
        'meta': {
            'page': page,
            'limit': limit,
            'total': total,
            'total_pages': math.ceil(total / limit),
        },
    }

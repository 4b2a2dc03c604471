import logging
from typing import Any

from sqlalchemy.orm import Session, sessionmaker

from backend.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


class AuditRecorder:
    """Writes audit entries in their own session. Failures are logged, never raised."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory

    def record(
        self,
        tenant_id: str,
        actor_id: str | None,
        action: str,
        resource_type: str,
        resource_id: str | None = None,
        before: Any = None,
        after: Any = None,
        correlation_id: str | None = None,
    ) -> None:
        db: Session | None = None
        try:
            db = self.session_factory()
            db.add(
                AuditLog(
                    tenant_id=tenant_id,
                    user_id=actor_id,
                    action=action,
                    resource=resource_type,
                    resource_id=resource_id,
                    before=before,
                    after=after,
                    correlation_id=correlation_id,
                )
            )
            db.commit()
        except Exception:
            logger.exception('Failed to write audit log %s for %s %s', action, resource_type, resource_id)
            if db is not None:
                db.rollback()
        finally:
            if db is not None:
                db.close()

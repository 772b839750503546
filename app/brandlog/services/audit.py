import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from app.brandlog.db.models import AuditEvent
from app.brandlog.repos.audit import AuditRepository

logger = logging.getLogger(__name__)

RESULT_SUCCESS = "success"
RESULT_FAILURE = "failure"


class AuditService:
    """Append-only audit trail for mutations and logins.

    A failed audit write is logged and rolled back; the caller's request still
    completes.
    """

    def __init__(self, db):
        self.db = db
        self.repo = AuditRepository(db)

    def record(
        self,
        action: str,
        *,
        actor: str,
        user_id=None,
        entity_type: str | None = None,
        entity_id=None,
        result: str = RESULT_SUCCESS,
        trace_id: str | None = None,
        metadata: dict | None = None,
    ) -> AuditEvent | None:
        event = AuditEvent(
            user_id=user_id,
            actor=actor,
            action=action,
            entity_type=entity_type,
            entity_id=None if entity_id is None else str(entity_id),
            event_metadata=metadata,
            result=result,
            trace_id=trace_id or None,
            created_at=datetime.utcnow(),
        )
        try:
            return self.repo.create(event)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to write audit event", extra={"action": action, "trace_id": trace_id})
            return None

    def record_success(self, actor, action: str, *, entity_type: str, entity_id, trace_id=None, metadata=None):
        return self.record(
            action,
            actor=actor.username,
            user_id=actor.id,
            entity_type=entity_type,
            entity_id=entity_id,
            trace_id=trace_id,
            metadata=metadata,
        )

    def record_failure(self, actor, action: str, *, error_code: str, trace_id=None):
        return self.record(
            action,
            actor=actor.username,
            user_id=actor.id,
            entity_type="user",
            entity_id=actor.id,
            result=RESULT_FAILURE,
            trace_id=trace_id,
            metadata={"error_code": error_code},
        )

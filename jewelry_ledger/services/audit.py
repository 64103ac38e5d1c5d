"""Audit trail helper."""

import json

from sqlalchemy.orm import Session

from jewelry_ledger.models.audit_log import AuditLog


def record_audit(
    db: Session,
    event_type: str,
    entity_type: str,
    entity_id: int | None,
    details: dict,
) -> AuditLog:
    """Add an audit row to the current unit of work."""
    entry = AuditLog(
        event_type=event_type,
        entity_type=entity_type,
        entity_id=entity_id,
        details=json.dumps(details, default=str),
    )
    db.add(entry)
    return entry

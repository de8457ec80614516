from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import UUID

from sqlmodel import Session, select

from community.models import AuditEntry

logger = logging.getLogger(__name__)


def _as_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def record(
    session: Session,
    *,
    entity_id: UUID,
    actor_id: Optional[UUID],
    action: str,
    field_name: Optional[str] = None,
    old_value: Any = None,
    new_value: Any = None,
) -> AuditEntry:
    entry = AuditEntry(
        entity_id=entity_id,
        actor_id=actor_id,
        action=action,
        field_name=field_name,
        old_value=_as_text(old_value),
        new_value=_as_text(new_value),
    )
    session.add(entry)
    logger.info(
        f"[Audit] {action} on {entity_id} by {actor_id}: "
        f"{field_name or ''} {old_value!r} -> {new_value!r}"
    )
    return entry


def history(session: Session, entity_id: UUID) -> list[AuditEntry]:
    return list(
        session.exec(
            select(AuditEntry)
            .where(AuditEntry.entity_id == entity_id)
            .order_by(AuditEntry.created_at.asc())
        ).all()
    )

"""Domain errors raised by the service layer.

Every error carries a machine readable ``kind`` plus the ids needed by a
caller to render its own message. Nothing here produces user-facing text.
"""

from __future__ import annotations

from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import status


class DomainError(Exception):
    kind: str = "domain_error"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        *,
        entity_id: Optional[UUID] = None,
        relationship_id: Optional[UUID] = None,
        **details: Any,
    ) -> None:
        self.entity_id = entity_id
        self.relationship_id = relationship_id
        self.details: Dict[str, Any] = details
        super().__init__(self.kind)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "relationship_id": (
                str(self.relationship_id) if self.relationship_id else None
            ),
            "details": {
                key: str(value) if isinstance(value, UUID) else value
                for key, value in self.details.items()
            },
        }

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(entity_id={self.entity_id}, "
            f"relationship_id={self.relationship_id}, details={self.details})"
        )


class NotFoundError(DomainError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(DomainError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class DuplicatePendingError(DomainError):
    kind = "duplicate_pending"
    status_code = status.HTTP_409_CONFLICT


class AlreadyMemberError(DomainError):
    kind = "already_member"
    status_code = status.HTTP_409_CONFLICT


class LastAdminError(DomainError):
    kind = "last_admin"
    status_code = status.HTTP_409_CONFLICT


class LastTeamMemberError(DomainError):
    kind = "last_team_member"
    status_code = status.HTTP_409_CONFLICT


class CapacityExceededError(DomainError):
    kind = "capacity_exceeded"
    status_code = status.HTTP_409_CONFLICT


class AlreadyParticipantError(DomainError):
    kind = "already_participant"
    status_code = status.HTTP_409_CONFLICT


class AlreadyWaitingError(DomainError):
    kind = "already_waiting"
    status_code = status.HTTP_409_CONFLICT


class TimeframeViolationError(DomainError):
    kind = "timeframe_violation"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class AlreadyResponsibleError(DomainError):
    kind = "already_responsible"
    status_code = status.HTTP_409_CONFLICT


class RoleNotAllowedError(DomainError):
    kind = "role_not_allowed"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class HierarchyCycleError(DomainError):
    kind = "hierarchy_cycle"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class SlugTakenError(DomainError):
    kind = "slug_taken"
    status_code = status.HTTP_409_CONFLICT


class UnknownFieldError(DomainError):
    kind = "unknown_field"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidTransitionError(DomainError):
    kind = "invalid_transition"
    status_code = status.HTTP_409_CONFLICT


class InvalidValueError(DomainError):
    kind = "invalid_value"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

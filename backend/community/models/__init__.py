from .audit_entry import AuditAction, AuditEntry
from .event import Event
from .field_visibility import FieldVisibility, VisibilityLevel
from .notification_outbox import NotificationOutbox
from .organization import NETWORK_KIND, Organization
from .person import Person
from .project import Project
from .relationship import Relationship, RelationshipState, Role


class EntityKind:
    PERSON = "person"
    ORGANIZATION = "organization"
    EVENT = "event"
    PROJECT = "project"

    ALL = (PERSON, ORGANIZATION, EVENT, PROJECT)


ENTITY_MODELS = {
    EntityKind.PERSON: Person,
    EntityKind.ORGANIZATION: Organization,
    EntityKind.EVENT: Event,
    EntityKind.PROJECT: Project,
}


def kind_of(entity) -> str:
    for kind, model in ENTITY_MODELS.items():
        if isinstance(entity, model):
            return kind
    raise TypeError(f"Not an entity: {type(entity).__name__}")


__all__ = [
    "AuditAction",
    "AuditEntry",
    "ENTITY_MODELS",
    "EntityKind",
    "Event",
    "FieldVisibility",
    "NETWORK_KIND",
    "NotificationOutbox",
    "Organization",
    "Person",
    "Project",
    "Relationship",
    "RelationshipState",
    "Role",
    "VisibilityLevel",
    "kind_of",
]

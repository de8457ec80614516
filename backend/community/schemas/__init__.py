from .event import (
    ChildLink,
    EventCreate,
    EventUpdate,
    ParentLink,
    ParticipantLimitUpdate,
    ParticipationCreate,
)
from .organization import OrganizationCreate, OrganizationUpdate
from .pagination import PaginationParams
from .person import PersonCreate, PersonUpdate
from .project import ProjectCreate, ProjectUpdate
from .relationship import (
    RelationshipInvite,
    RelationshipRead,
    RelationshipRemoval,
    RelationshipRequest,
    ResponsibleOrganizationLink,
    SlugChange,
)

__all__ = [
    "ChildLink",
    "EventCreate",
    "EventUpdate",
    "OrganizationCreate",
    "OrganizationUpdate",
    "PaginationParams",
    "ParentLink",
    "ParticipantLimitUpdate",
    "ParticipationCreate",
    "PersonCreate",
    "PersonUpdate",
    "ProjectCreate",
    "ProjectUpdate",
    "RelationshipInvite",
    "RelationshipRead",
    "RelationshipRemoval",
    "RelationshipRequest",
    "ResponsibleOrganizationLink",
    "SlugChange",
]

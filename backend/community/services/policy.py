"""Per (entity kind, role) creation policy for relationships.

Which creation paths a role offers differs between entity kinds (admins
are invite-only everywhere, event team members can be added directly,
organization team members can ask to join). The matrix lives here as data
and can be overridden through ``settings.ROLE_POLICY_OVERRIDES``.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from community.core.config import settings
from community.models import EntityKind, Role

logger = logging.getLogger(__name__)


class RolePolicy(BaseModel):
    requestable: bool = False
    invitable: bool = False
    direct_add: bool = False

    model_config = ConfigDict(frozen=True)


DEFAULT_ROLE_POLICIES: Dict[Tuple[str, str], RolePolicy] = {
    (EntityKind.ORGANIZATION, Role.ADMIN): RolePolicy(invitable=True),
    (EntityKind.ORGANIZATION, Role.TEAM_MEMBER): RolePolicy(requestable=True, invitable=True),
    (EntityKind.ORGANIZATION, Role.NETWORK_MEMBER): RolePolicy(
        requestable=True, invitable=True, direct_add=True
    ),
    (EntityKind.EVENT, Role.ADMIN): RolePolicy(invitable=True),
    (EntityKind.EVENT, Role.TEAM_MEMBER): RolePolicy(invitable=True, direct_add=True),
    (EntityKind.EVENT, Role.SPEAKER): RolePolicy(invitable=True, direct_add=True),
    (EntityKind.PROJECT, Role.ADMIN): RolePolicy(invitable=True),
    (EntityKind.PROJECT, Role.TEAM_MEMBER): RolePolicy(invitable=True, direct_add=True),
}


def _load_policies() -> Dict[Tuple[str, str], RolePolicy]:
    policies = dict(DEFAULT_ROLE_POLICIES)
    for key, override in settings.ROLE_POLICY_OVERRIDES.items():
        kind, _, role = key.partition(":")
        if kind not in EntityKind.ALL or role not in Role.ALL:
            logger.warning(f"Ignoring role policy override for unknown pair {key!r}")
            continue
        base = policies.get((kind, role), RolePolicy())
        policies[(kind, role)] = base.model_copy(update=override)
        logger.info(f"Role policy for {key} overridden: {policies[(kind, role)]}")
    return policies


ROLE_POLICIES = _load_policies()


def get_policy(object_kind: str, role: str) -> Optional[RolePolicy]:
    return ROLE_POLICIES.get((object_kind, role))


def subject_kind_for(role: str) -> str:
    if role in Role.ORGANIZATION_SUBJECT:
        return EntityKind.ORGANIZATION
    return EntityKind.PERSON

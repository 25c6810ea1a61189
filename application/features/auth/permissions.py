from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Protocol, Set, Union

from fastapi import Depends, HTTPException, status

from application.features.auth.jwt_handler import verify_jwt_token

ROLE_HIERARCHY = {
    "Admin": {"Admin", "Advisor", "Peer Tutor", "Student"},
    "Advisor": {"Advisor", "Peer Tutor", "Student"},
    "Peer Tutor": {"Peer Tutor", "Student"},
    "Student": {"Student"},
}

CAP_VIEW = "mod/assign:view"
CAP_SUBMIT = "mod/assign:submit"
CAP_GRADE = "mod/assign:grade"
CAP_REVEAL_IDENTITIES = "mod/assign:revealidentities"
CAP_MANAGE = "mod/assign:manage"

# Capabilities granted by a course role, before hierarchy expansion
ROLE_CAPABILITIES = {
    "Student": {CAP_VIEW, CAP_SUBMIT},
    "Peer Tutor": {CAP_VIEW, CAP_GRADE},
    "Advisor": {CAP_VIEW, CAP_GRADE, CAP_REVEAL_IDENTITIES, CAP_MANAGE},
    "Admin": set(),
}

SITE_ADMIN_ROLE = "Admin"


@dataclass(frozen=True)
class Allowed:
    scope: Any


@dataclass(frozen=True)
class Denied:
    reason: str


AuthorizationDecision = Union[Allowed, Denied]


class AuthorizationChecker(Protocol):
    def validate_context(self, course_id: int) -> AuthorizationDecision:
        ...

    def require_capability(self, capability: str, course_id: int) -> AuthorizationDecision:
        ...

    def has_all_capabilities(self, capabilities: Iterable[str], course_id: int) -> bool:
        ...


def _expand_roles(user_roles: Set[str]) -> Set[str]:
    expanded_roles = set()
    for role in user_roles:
        expanded_roles.update(ROLE_HIERARCHY.get(role, {role}))
    return expanded_roles


def capabilities_for_roles(user_roles: Set[str]) -> Set[str]:
    capabilities = set()
    for role in _expand_roles(user_roles):
        capabilities.update(ROLE_CAPABILITIES.get(role, set()))
    return capabilities


class RoleCapabilityChecker:
    """
    Capability checks against the caller's course enrolments.

    Site admins (Admin in the token's role_names) pass every check. Anyone
    else must hold an active enrolment in the course, and the capability
    must be granted by one of the roles of that enrolment once expanded
    through ROLE_HIERARCHY.
    """

    def __init__(self, user_data: Dict, load_course_roles: Callable[[], Dict[int, Set[str]]]):
        self.user_id = user_data.get("user_id")
        self.site_roles = set(user_data.get("role_names") or [])
        self._load_course_roles = load_course_roles
        self._course_roles = None

    @property
    def course_roles(self) -> Dict[int, Set[str]]:
        """Course id -> role names, loaded on first check."""
        if self._course_roles is None:
            self._course_roles = self._load_course_roles()
        return self._course_roles

    @property
    def is_site_admin(self) -> bool:
        return SITE_ADMIN_ROLE in self.site_roles

    def validate_context(self, course_id: int) -> AuthorizationDecision:
        if self.is_site_admin or course_id in self.course_roles:
            return Allowed(course_id)
        return Denied(f"User {self.user_id} is not enrolled in course {course_id}")

    def require_capability(self, capability: str, course_id: int) -> AuthorizationDecision:
        decision = self.validate_context(course_id)
        if isinstance(decision, Denied) or self.is_site_admin:
            return decision
        if capability in capabilities_for_roles(self.course_roles[course_id]):
            return decision
        return Denied(f"Missing capability {capability} in course {course_id}")

    def has_all_capabilities(self, capabilities: Iterable[str], course_id: int) -> bool:
        return all(
            isinstance(self.require_capability(capability, course_id), Allowed)
            for capability in capabilities
        )


def _check_user_roles(user_data: dict):
    if "role_names" not in user_data or not isinstance(user_data["role_names"], list):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Role information missing from token."
        )

    if not _expand_roles(set(user_data["role_names"])):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Authenticated user has no assigned roles in token."
        )


def require_user_access(user_data: Dict = Depends(verify_jwt_token)) -> Dict:
    _check_user_roles(user_data)
    return user_data

"""
Site roles and the business permission matrix.

This is workflow gating, not security: the acting role arrives in a request
header and is trusted as-is.
"""

from enum import Enum


class UserRole(str, Enum):
    ADMIN = "Admin"
    PROJECT_MANAGER = "Project Manager"
    SITE_ENGINEER = "Site Engineer"
    SUPERVISOR = "Supervisor"
    LAB_TECHNICIAN = "Lab Technician"


DEFAULT_ROLE = UserRole.PROJECT_MANAGER

# action -> roles allowed to perform it
PERMISSIONS: dict[str, frozenset[UserRole]] = {
    "boq.edit": frozenset({UserRole.PROJECT_MANAGER, UserRole.SITE_ENGINEER}),
    "boq.import": frozenset({UserRole.PROJECT_MANAGER, UserRole.SITE_ENGINEER}),
    "schedule.edit": frozenset({
        UserRole.PROJECT_MANAGER,
        UserRole.SITE_ENGINEER,
        UserRole.SUPERVISOR,
    }),
    "project.delete": frozenset({UserRole.ADMIN, UserRole.PROJECT_MANAGER}),
}


def is_allowed(role: UserRole, action: str) -> bool:
    """Unlisted actions are open to every role."""
    allowed = PERMISSIONS.get(action)
    return allowed is None or role in allowed

"""
Role decorators for route protection.

The acting role comes from the ``X-User-Role`` header (default: Project
Manager) and is checked against ``siteledger.models.roles.PERMISSIONS``.

Usage:
    @bp.route("/projects/<project_id>/boq/import", methods=["POST"])
    @require_role("boq.import")
    def import_boq(project_id):
        ...
"""

import functools
import logging

from flask import g, request

from siteledger.core.exceptions import PermissionDeniedError, ValidationError
from siteledger.models.base import coerce_enum
from siteledger.models.roles import DEFAULT_ROLE, UserRole, is_allowed

logger = logging.getLogger(__name__)

ROLE_HEADER = "X-User-Role"


def acting_role() -> UserRole:
    """Role of the current request, cached on ``g``."""
    role = getattr(g, "acting_role_enum", None)
    if role is not None:
        return role
    raw = request.headers.get(ROLE_HEADER)
    if raw:
        role = coerce_enum(UserRole, raw)
        if role is None:
            raise ValidationError(
                f"Unknown role '{raw}'", details={ROLE_HEADER: [r.value for r in UserRole]}
            )
    else:
        role = DEFAULT_ROLE
    g.acting_role_enum = role
    g.acting_role = role.value
    return role


def require_role(action: str):
    """
    Decorator: the acting role must be allowed to perform ``action``.

    Raises PermissionDeniedError (-> 403 via the blueprint error handlers).
    """
    def decorator(f):
        @functools.wraps(f)
        def decorated(*args, **kwargs):
            role = acting_role()
            if not is_allowed(role, action):
                logger.warning("Role '%s' denied '%s' on %s", role.value, action, f.__name__)
                raise PermissionDeniedError(role.value, action)
            return f(*args, **kwargs)
        return decorated
    return decorator

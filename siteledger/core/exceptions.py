"""
Platform-wide exception hierarchy.

Services raise these; blueprints register handlers against them once and
get consistent HTTP status codes everywhere.

Usage:
    from siteledger.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Project", resource_id="proj-001")
    raise ValidationError("name is required", details={"name": "required"})
"""


class NotFoundError(Exception):
    """Raised when a requested resource does not exist within its project.

    Maps to HTTP 404.

    Args:
        resource: Human-readable entity name (e.g. "Project", "BOQItem").
        resource_id: The id that was looked up.
        project_id: Optional owning project, included in the message.
    """

    def __init__(
        self,
        resource: str,
        resource_id: str | None = None,
        project_id: str | None = None,
    ) -> None:
        self.resource = resource
        self.resource_id = resource_id
        self.project_id = project_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        if project_id is not None:
            msg += f" (project={project_id})"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when input fails business-rule validation in the service layer.

    Distinct from HTTP 400 (malformed body, caught in the blueprint): the
    payload was well-formed but violated a rule (missing required field on a
    draft, negative quantity, edit refused by the progress policy).

    Maps to HTTP 422.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown. Keys are field names.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class PermissionDeniedError(Exception):
    """Raised when the acting role may not perform an action.

    Maps to HTTP 403.
    """

    def __init__(self, role: str, action: str) -> None:
        self.role = role
        self.action = action
        super().__init__(f"Role '{role}' is not allowed to {action}")


class StorageError(Exception):
    """Raised when reading or writing the data directory fails.

    Maps to HTTP 500. The original OSError is chained as ``__cause__``.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)

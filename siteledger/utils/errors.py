"""Standardised API error responses.

Usage
-----
    from siteledger.utils.errors import api_error, E

    return api_error(E.NOT_FOUND, "Project not found")
    return api_error(E.VALIDATION_REQUIRED, "boq_item_id is required")
"""

from __future__ import annotations

from flask import jsonify


# ── Error code constants ──────────────────────────────────────────────
class E:
    """Machine-readable error code constants (``ERR_`` prefix)."""

    # Validation – HTTP 400
    VALIDATION_REQUIRED = "ERR_VALIDATION_REQUIRED"
    VALIDATION_INVALID = "ERR_VALIDATION_INVALID"

    # Business rule – HTTP 422
    BUSINESS_RULE = "ERR_BUSINESS_RULE"

    # Import – HTTP 400
    IMPORT_FORMAT = "ERR_IMPORT_FORMAT"

    # Not-found – HTTP 404
    NOT_FOUND = "ERR_NOT_FOUND"

    # Permissions – HTTP 403
    FORBIDDEN = "ERR_FORBIDDEN"

    # Server – HTTP 500
    STORAGE = "ERR_STORAGE"


# ── Default HTTP status mapping ───────────────────────────────────────
_DEFAULT_STATUS: dict[str, int] = {
    E.VALIDATION_REQUIRED: 400,
    E.VALIDATION_INVALID: 400,
    E.BUSINESS_RULE: 422,
    E.IMPORT_FORMAT: 400,
    E.NOT_FOUND: 404,
    E.FORBIDDEN: 403,
    E.STORAGE: 500,
}


def api_error(
    code: str,
    message: str,
    *,
    status: int | None = None,
    details: dict | None = None,
):
    """Return a standard JSON error response.

    Parameters
    ----------
    code : str
        Machine-readable error code (use ``E.*`` constants).
    message : str
        Human-readable explanation for the UI.
    status : int, optional
        HTTP status override.  Falls back to ``_DEFAULT_STATUS[code]``,
        then to ``400``.
    details : dict, optional
        Extra structured payload (field errors, offending ids).

    Returns
    -------
    tuple[Response, int]
        ``(jsonify(body), http_status)`` – drop-in for Flask views.
    """

    http_status = status or _DEFAULT_STATUS.get(code, 400)

    body: dict = {
        "error": message,
        "code": code,
    }
    if details:
        body["details"] = details

    return jsonify(body), http_status


def register_error_handlers(blueprint):
    """Attach the platform exception handlers to a blueprint.

    Every domain blueprint calls this once at import time so services can
    raise ``NotFoundError`` / ``ValidationError`` / ``PermissionDeniedError``
    without each view catching them.
    """
    import logging

    from flask import request

    from siteledger.core.exceptions import (
        NotFoundError,
        PermissionDeniedError,
        StorageError,
        ValidationError,
    )

    log = logging.getLogger(blueprint.import_name)

    @blueprint.errorhandler(NotFoundError)
    def _handle_not_found(error: NotFoundError):
        return api_error(E.NOT_FOUND, str(error))

    @blueprint.errorhandler(ValidationError)
    def _handle_validation(error: ValidationError):
        return api_error(E.BUSINESS_RULE, str(error), details=error.details)

    @blueprint.errorhandler(PermissionDeniedError)
    def _handle_forbidden(error: PermissionDeniedError):
        log.warning("Denied %s on %s", error.role, request.endpoint)
        return api_error(E.FORBIDDEN, str(error))

    @blueprint.errorhandler(StorageError)
    def _handle_storage(error: StorageError):
        log.error("Storage failure on %s: %s", request.endpoint, error)
        return api_error(E.STORAGE, "Storage error")

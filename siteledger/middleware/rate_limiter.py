"""
Rate limiting configuration.

Applies per-blueprint limits using Flask-Limiter. The Limiter instance is
created in siteledger/__init__.py with no default limits; this module
applies limits per route category.

Usage:
    from siteledger.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

logger = logging.getLogger(__name__)

WRITE_LIMIT = "60/minute"
READ_LIMIT = "200/minute"

_WRITE_BLUEPRINTS = (
    "projects", "boq", "schedule", "daily_reports",
    "quality", "resources", "correspondence",
)


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits (per remote IP):
        - AI endpoints:       AI_RATE_LIMIT (default 10/minute)
        - Module endpoints:   60/minute
        - Dashboard:          200/minute
        - Health check:       exempt

    Rate limiting is disabled when RATELIMIT_ENABLED is false (testing).
    """
    if not app.config.get("RATELIMIT_ENABLED", True):
        app.logger.info("Rate limiter disabled (RATELIMIT_ENABLED=False)")
        return

    bp = app.blueprints.get("ai")
    if bp:
        limiter.limit(app.config.get("AI_RATE_LIMIT", "10/minute"))(bp)

    for bp_name in _WRITE_BLUEPRINTS:
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.limit(WRITE_LIMIT)(bp)

    bp = app.blueprints.get("dashboard")
    if bp:
        limiter.limit(READ_LIMIT)(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    app.logger.info(
        "Rate limiter configured: AI %s, modules %s, dashboard %s",
        app.config.get("AI_RATE_LIMIT"), WRITE_LIMIT, READ_LIMIT,
    )

"""
Health check blueprint.

Endpoints:
    GET /api/v1/health         simple 200 for load balancers
    GET /api/v1/health/ready   storage readiness (data directory writable)
"""

import logging
import os
import time

from flask import Blueprint, current_app, jsonify

from siteledger.models import store

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api/v1/health")


@health_bp.route("", methods=["GET"])
def health():
    return jsonify({"status": "ok", "app": "SiteLedger"}), 200


@health_bp.route("/ready", methods=["GET"])
def ready():
    """Readiness probe: the project file's directory must be writable."""
    checks = {}
    overall = True

    t0 = time.perf_counter()
    data_dir = os.path.dirname(store.path) if store.path else current_app.config.get("DATA_DIR", "")
    if data_dir and os.path.isdir(data_dir) and os.access(data_dir, os.W_OK):
        checks["storage"] = {
            "status": "ok",
            "projects": len(store.list()),
            "latency_ms": round((time.perf_counter() - t0) * 1000, 1),
        }
    else:
        checks["storage"] = {"status": "error", "detail": f"{data_dir or 'DATA_DIR'} is not writable"}
        overall = False
        logger.error("Health check: data directory %s not writable", data_dir)

    checks["progress_source"] = store.policy.value
    status = "ok" if overall else "degraded"
    return jsonify({"status": status, "checks": checks}), 200 if overall else 503

"""
SiteLedger
Resources blueprint: store inventory and vehicle fleet.

Endpoints:
    INVENTORY  /api/v1/projects/<pid>/inventory                           GET (?q=&category=), POST
               /api/v1/projects/<pid>/inventory/low-stock                 GET
               /api/v1/projects/<pid>/inventory/<item_id>                 DELETE
               /api/v1/projects/<pid>/inventory/<item_id>/adjust          POST  {delta}
               /api/v1/projects/<pid>/inventory/<item_id>/transactions    GET, POST

    VEHICLES   /api/v1/projects/<pid>/vehicles                            GET, POST
               /api/v1/projects/<pid>/vehicles/<vehicle_id>/status        PATCH
               /api/v1/projects/<pid>/vehicles/<vehicle_id>/logs          GET, POST
               /api/v1/projects/<pid>/vehicles/<vehicle_id>/costs         GET
"""

import logging

from flask import Blueprint, jsonify, request

from siteledger.models import store
from siteledger.models.drafts import DraftInventoryItem, DraftTransaction, DraftVehicle, DraftVehicleLog
from siteledger.services import resource_service
from siteledger.utils.errors import E, api_error, register_error_handlers
from siteledger.utils.helpers import to_number

logger = logging.getLogger(__name__)

resource_bp = Blueprint("resources", __name__, url_prefix="/api/v1")
register_error_handlers(resource_bp)


def _json_object():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


# ═══════════════════════════════════════════════════════════════════════════
#  Inventory
# ═══════════════════════════════════════════════════════════════════════════

@resource_bp.route("/projects/<project_id>/inventory", methods=["GET"])
def list_inventory(project_id):
    items = resource_service.search_inventory(
        store.get(project_id), request.args.get("q"), request.args.get("category"),
    )
    return jsonify({"items": [i.to_dict() for i in items], "total": len(items)})


@resource_bp.route("/projects/<project_id>/inventory", methods=["POST"])
def add_inventory_item(project_id):
    data = _json_object()
    if data is None:
        return api_error(E.VALIDATION_INVALID, "JSON object body required")
    updated, item = resource_service.add_inventory_item(
        store.get(project_id), DraftInventoryItem.from_payload(data),
    )
    store.commit(updated)
    return jsonify(item.to_dict()), 201


@resource_bp.route("/projects/<project_id>/inventory/low-stock", methods=["GET"])
def list_low_stock(project_id):
    items = resource_service.low_stock(store.get(project_id))
    return jsonify({"items": [i.to_dict() for i in items], "total": len(items)})


@resource_bp.route("/projects/<project_id>/inventory/<item_id>", methods=["DELETE"])
def delete_inventory_item(project_id, item_id):
    store.commit(resource_service.delete_inventory_item(store.get(project_id), item_id))
    return jsonify({"deleted": True, "id": item_id})


@resource_bp.route("/projects/<project_id>/inventory/<item_id>/adjust", methods=["POST"])
def adjust_stock(project_id, item_id):
    data = _json_object() or {}
    if data.get("delta") is None:
        return api_error(E.VALIDATION_REQUIRED, "delta is required")
    updated, item = resource_service.adjust_stock(
        store.get(project_id), item_id, to_number(data["delta"]),
    )
    store.commit(updated)
    return jsonify(item.to_dict())


@resource_bp.route("/projects/<project_id>/inventory/<item_id>/transactions", methods=["GET"])
def list_transactions(project_id, item_id):
    item = resource_service.get_inventory_item(store.get(project_id), item_id)
    return jsonify({"items": [t.to_dict() for t in reversed(item.transactions)],
                    "balance": item.quantity})


@resource_bp.route("/projects/<project_id>/inventory/<item_id>/transactions", methods=["POST"])
def record_transaction(project_id, item_id):
    data = _json_object()
    if data is None:
        return api_error(E.VALIDATION_INVALID, "JSON object body required")
    updated, txn = resource_service.record_transaction(
        store.get(project_id), item_id, DraftTransaction.from_payload(data),
    )
    project = store.commit(updated)
    balance = resource_service.get_inventory_item(project, item_id).quantity
    return jsonify({**txn.to_dict(), "balance": balance}), 201


# ═══════════════════════════════════════════════════════════════════════════
#  Vehicles
# ═══════════════════════════════════════════════════════════════════════════

@resource_bp.route("/projects/<project_id>/vehicles", methods=["GET"])
def list_vehicles(project_id):
    vehicles = store.get(project_id).vehicles
    return jsonify({"items": [v.to_dict() for v in vehicles], "total": len(vehicles)})


@resource_bp.route("/projects/<project_id>/vehicles", methods=["POST"])
def add_vehicle(project_id):
    data = _json_object()
    if data is None:
        return api_error(E.VALIDATION_INVALID, "JSON object body required")
    updated, vehicle = resource_service.add_vehicle(store.get(project_id), DraftVehicle.from_payload(data))
    store.commit(updated)
    return jsonify(vehicle.to_dict()), 201


@resource_bp.route("/projects/<project_id>/vehicles/<vehicle_id>/status", methods=["PATCH"])
def set_vehicle_status(project_id, vehicle_id):
    data = _json_object() or {}
    if not data.get("status"):
        return api_error(E.VALIDATION_REQUIRED, "status is required")
    updated, vehicle = resource_service.set_vehicle_status(
        store.get(project_id), vehicle_id, data["status"],
    )
    store.commit(updated)
    return jsonify(vehicle.to_dict())


@resource_bp.route("/projects/<project_id>/vehicles/<vehicle_id>/logs", methods=["GET"])
def list_vehicle_logs(project_id, vehicle_id):
    vehicle = resource_service.get_vehicle(store.get(project_id), vehicle_id)
    log_type = request.args.get("log_type")
    logs = [entry for entry in vehicle.logs if not log_type or entry.log_type.value == log_type]
    return jsonify({"items": [entry.to_dict() for entry in logs], "total": len(logs)})


@resource_bp.route("/projects/<project_id>/vehicles/<vehicle_id>/logs", methods=["POST"])
def add_vehicle_log(project_id, vehicle_id):
    data = _json_object()
    if data is None:
        return api_error(E.VALIDATION_INVALID, "JSON object body required")
    updated, log = resource_service.add_vehicle_log(
        store.get(project_id), vehicle_id, DraftVehicleLog.from_payload(data),
    )
    store.commit(updated)
    return jsonify(log.to_dict()), 201


@resource_bp.route("/projects/<project_id>/vehicles/<vehicle_id>/costs", methods=["GET"])
def vehicle_costs(project_id, vehicle_id):
    project = store.get(project_id)
    vehicle = resource_service.get_vehicle(project, vehicle_id)
    return jsonify({**resource_service.vehicle_costs(vehicle), "currency": project.currency})

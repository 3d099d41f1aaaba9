# routes.py - JSON API
import logging

from flask import Blueprint, current_app, jsonify, request

from . import __version__, store
from .errors import NotConfiguredError, StoreError, SwarmboardError, ValidationError
from .identity import container_identity, get_hostname, get_snapshot, utcnow_iso

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")
items_api = Blueprint("items_api", __name__, url_prefix="/api/items")

# Requests that should not count as visits (Swarm health checks hit this constantly)
UNINSTRUMENTED = {"/api/health"}


# ---------- Helpers ----------

def _settings():
    return current_app.config["SWARMBOARD_SETTINGS"]


def _state():
    return current_app.extensions["swarmboard_state"]


def _items():
    return current_app.extensions["swarmboard_items"]


def _error(exc):
    return jsonify(exc.to_dict()), exc.status_code


def _client_ip():
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr


# ---------- Visit recording ----------

@api.before_app_request
def record_request():
    """Count the request and store a Visit before the handler runs.

    The SQLite write happens inline, so the response waits on it. A failed
    write is logged and never fails the request.
    """
    path = request.path
    if not path.startswith("/api/") or path in UNINSTRUMENTED:
        return
    _state().count_request()
    hostname, container_id = container_identity()
    try:
        store.record_visit(hostname, container_id, _client_ip(), request.headers.get("User-Agent"))
    except StoreError as e:
        # the visit is lost but the request itself goes on
        logger.warning("Could not record visit for %s: %s", path, e)


@api.app_errorhandler(404)
def not_found(e):
    if request.path.startswith("/api/"):
        return jsonify({"error": "not_found", "message": f"No route for {request.path}"}), 404
    return e


# ---------- Identity ----------

@api.route("/server-info")
def server_info():
    data = get_snapshot()
    data.update(_state().snapshot())
    return jsonify(data)


@api.route("/health")
def health():
    return jsonify({
        "status": "healthy",
        "timestamp": utcnow_iso(),
        "hostname": get_hostname(),
        "uptime": _state().snapshot()["processUptime"],
    })


@api.route("/config")
def config():
    settings = _settings()
    items = current_app.extensions.get("swarmboard_items")
    return jsonify({
        "apiGatewayUrl": items.base_url if items is not None and items.configured else None,
        "itemsEnabled": items is not None,
        "version": __version__,
        "environment": settings.environment,
        "pollIntervalMs": settings.poll_interval_ms,
        "secretsLoaded": sorted(settings.secrets),
        "database": {
            "host": settings.db_host,
            "user": settings.db_user,
            "name": settings.db_name,
            "port": settings.db_port,
        },
    })


# ---------- Stats & messages ----------

@api.route("/stats")
def stats():
    try:
        data = store.get_stats()
    except StoreError as e:
        logger.exception("Failed to compute stats:")
        return _error(e)
    data["current_container"] = get_hostname()
    data["timestamp"] = utcnow_iso()
    return jsonify(data)


@api.route("/messages", methods=["GET"])
def list_messages():
    try:
        messages = store.list_messages(request.args.get("limit", store.DEFAULT_LIMIT))
    except StoreError as e:
        logger.exception("Failed to list messages:")
        return _error(e)
    return jsonify({
        "messages": messages,
        "current_container": get_hostname(),
        "timestamp": utcnow_iso(),
    })


@api.route("/messages", methods=["POST"])
def create_message():
    data = request.get_json(silent=True) or {}
    hostname, container_id = container_identity()
    try:
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        text = data.get("message")
        author = data.get("author")
        if not isinstance(text, str) or (author is not None and not isinstance(author, str)):
            raise ValidationError("Message and author must be strings")
        msg = store.add_message(text, author, hostname=hostname, container_id=container_id)
    except ValidationError as e:
        return _error(e)
    except StoreError as e:
        logger.exception("Failed to save message:")
        return _error(e)
    logger.info("Message %s stored by %s", msg["id"], hostname)
    return jsonify({
        "success": True,
        "message_id": msg["id"],
        "message": msg,
        "processed_by": hostname,
        "timestamp": utcnow_iso(),
    })


@api.route("/messages/<int:message_id>", methods=["DELETE"])
def delete_message(message_id):
    try:
        deleted = store.delete_message(message_id)
    except StoreError as e:
        logger.exception("Failed to delete message:")
        return _error(e)
    if not deleted:
        return jsonify({"error": "not_found", "message": f"Message {message_id} not found"}), 404
    return jsonify({
        "success": True,
        "deleted_id": message_id,
        "processed_by": get_hostname(),
        "timestamp": utcnow_iso(),
    })


# ---------- Item proxy ----------

def _proxy(call, *args):
    try:
        return jsonify(call(*args))
    except NotConfiguredError as e:
        logger.error("Item API not configured")
        return _error(e)
    except SwarmboardError as e:
        logger.exception("Item API call failed:")
        return _error(e)


@items_api.route("", methods=["GET"])
def list_items():
    return _proxy(_items().list_items)


@items_api.route("", methods=["POST"])
def create_item():
    return _proxy(_items().create_item, request.get_json(silent=True) or {})


@items_api.route("/<item_id>", methods=["GET"])
def get_item(item_id):
    return _proxy(_items().get_item, item_id)


@items_api.route("/<item_id>", methods=["PUT"])
def update_item(item_id):
    return _proxy(_items().update_item, item_id, request.get_json(silent=True) or {})


@items_api.route("/<item_id>", methods=["DELETE"])
def delete_item(item_id):
    try:
        _items().delete_item(item_id)
    except SwarmboardError as e:
        logger.exception("Item API call failed:")
        return _error(e)
    return jsonify({"success": True, "deleted_id": item_id})

from flask import Blueprint, current_app, jsonify, request


tasks_bp = Blueprint("tasks", __name__)


def _service():
    return current_app.extensions["task_service"]


def _json_body():
    payload = request.get_json(silent=True)
    return {} if payload is None else payload


# Older clients call the collection with a trailing slash
@tasks_bp.get("")
@tasks_bp.get("/")
def list_tasks():
    args = request.args
    tasks = _service().list_tasks(
        category=args.get("category"),
        include_archived=args.get("includeArchived"),
        done=args.get("done"),
        sort=args.get("sort"),
        order=args.get("order"),
    )
    return jsonify([t.to_dict() for t in tasks]), 200


@tasks_bp.post("")
@tasks_bp.post("/")
def create_task():
    task = _service().create_task(_json_body())
    return jsonify(task.to_dict()), 201


@tasks_bp.get("/<task_id>")
def get_task(task_id):
    return jsonify(_service().get_task(task_id).to_dict()), 200


@tasks_bp.patch("/<task_id>")
def update_task(task_id):
    task = _service().update_task(task_id, _json_body())
    return jsonify(task.to_dict()), 200


@tasks_bp.route("/<task_id>/toggle", methods=["POST", "PATCH"])
def toggle_task(task_id):
    payload = _json_body()
    if not isinstance(payload, dict):
        payload = {}
    task = _service().toggle_task(task_id, payload.get("field"), payload.get("value"))
    return jsonify(task.to_dict()), 200


@tasks_bp.patch("/<task_id>/archive")
def archive_task(task_id):
    return jsonify(_service().archive_task(task_id).to_dict()), 200


@tasks_bp.delete("/<task_id>")
def delete_task(task_id):
    _service().delete_task(task_id)
    return "", 204

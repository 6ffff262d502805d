"""Paths blueprint: root/admin management of roots.json entries."""

from flask import Blueprint, jsonify, request

from root_explorer.errors import NotFoundError
from root_explorer.web.auth import require_path_admin


def create_bp(orchestrator):
    """Create paths blueprint with routes closed over orchestrator."""
    bp = Blueprint("paths", __name__)
    registry = orchestrator.registry

    @bp.route("/paths")
    def list_paths():
        require_path_admin(orchestrator)
        snapshot = registry.snapshot
        return jsonify({
            "systemPaths": [r.to_admin_dict() for r in snapshot.system],
            "userPaths": [r.to_admin_dict() for r in snapshot.user],
        })

    @bp.route("/paths/<root_id>")
    def get_path(root_id):
        require_path_admin(orchestrator)
        root = registry.snapshot.find_exact(root_id)
        if root is None:
            raise NotFoundError("Path not found")
        out = root.to_admin_dict()
        out["type"] = root.root_class.value
        return jsonify(out)

    @bp.route("/paths", methods=["POST"])
    def add_path():
        require_path_admin(orchestrator)
        body = request.get_json(silent=True) or {}
        root_id = body.get("id")
        registry.add(body.get("type"), root_id, body.get("path"), name=body.get("name"))
        return jsonify({"success": True, "message": f"Path {root_id} created successfully"})

    @bp.route("/paths/<root_id>", methods=["PUT"])
    def update_path(root_id):
        require_path_admin(orchestrator)
        body = request.get_json(silent=True) or {}
        registry.update(root_id, name=body.get("name"), path=body.get("path"))
        return jsonify({"success": True, "message": f"Path {root_id} updated successfully"})

    @bp.route("/paths/<root_id>", methods=["DELETE"])
    def delete_path(root_id):
        require_path_admin(orchestrator)
        registry.remove(root_id)
        return jsonify({"success": True, "message": f"Path {root_id} deleted successfully"})

    return bp

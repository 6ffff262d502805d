"""Files blueprint: roots, list, tree, preview, download, upload, directory, delete."""

import logging
import os

from flask import Blueprint, jsonify, request, send_file

from root_explorer.constants import LOGGER_NAME
from root_explorer.errors import ForbiddenError, InvalidArgumentError
from root_explorer.web.auth import current_identity, require_identity

logger = logging.getLogger(LOGGER_NAME)


def create_bp(orchestrator):
    """Create files blueprint with routes closed over orchestrator."""
    bp = Blueprint("files", __name__)
    registry = orchestrator.registry
    policy = orchestrator.policy
    browse = orchestrator.browse_service
    mutations = orchestrator.mutation_service

    def _query_target(default_path: str = "/") -> tuple[str, str | None]:
        return request.args.get("path") or default_path, request.args.get("rootId") or None

    def _guarded_read_target():
        """Session, root access and the "/" rule shared by list/tree/preview."""
        identity = require_identity(orchestrator)
        request_path, root_id = _query_target()
        policy.require_root_access(identity, root_id, request_path)
        return request_path, root_id

    def _require_root_access(identity, root_id):
        if not policy.can_access_root(identity, root_id):
            raise ForbiddenError("Forbidden: You don't have access to this path")

    @bp.route("/roots")
    def list_roots():
        registry.refresh_existence()
        identity = current_identity(orchestrator)
        return jsonify([r.to_summary() for r in policy.visible_roots(identity)])

    @bp.route("/list")
    def list_directory():
        request_path, root_id = _guarded_read_target()
        return jsonify(browse.list_directory(request_path, root_id))

    @bp.route("/tree")
    def tree():
        request_path, root_id = _guarded_read_target()
        return jsonify(browse.root_tree(request_path, root_id))

    @bp.route("/preview")
    def preview():
        request_path, root_id = _guarded_read_target()
        return jsonify(browse.get_preview(request_path, root_id).to_dict())

    @bp.route("/download")
    def download():
        identity = require_identity(orchestrator)
        request_path, root_id = _query_target(default_path="")
        _require_root_access(identity, root_id)
        resolved = mutations.locate_download(request_path, root_id)
        return send_file(
            resolved.full_path,
            as_attachment=True,
            download_name=os.path.basename(resolved.full_path),
        )

    @bp.route("/upload", methods=["POST"])
    def upload():
        identity = require_identity(orchestrator)
        request_path = request.form.get("path") or "/"
        root_id = request.form.get("rootId") or None
        uploaded = request.files.get("file")
        if uploaded is None:
            raise InvalidArgumentError("No file uploaded")
        filename = request.form.get("filename") or uploaded.filename
        if not filename:
            raise InvalidArgumentError("Filename is required")
        _require_root_access(identity, root_id)
        mutations.upload(request_path, root_id, filename, uploaded.read())
        return jsonify({"success": True, "message": f"File {filename} uploaded successfully"})

    @bp.route("/directory", methods=["POST"])
    def create_directory():
        identity = require_identity(orchestrator)
        body = request.get_json(silent=True) or {}
        request_path = body.get("path") or "/"
        root_id = body.get("rootId") or None
        name = body.get("name")
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError("Directory name is required")
        _require_root_access(identity, root_id)
        created = mutations.create_directory(request_path, root_id, name)
        dir_name = os.path.basename(created.full_path)
        return jsonify({"success": True, "message": f'Directory "{dir_name}" created successfully'})

    @bp.route("/item", methods=["DELETE"])
    def delete_item():
        identity = require_identity(orchestrator)
        request_path, root_id = _query_target(default_path="")
        mutations.delete(identity, request_path, root_id)
        return jsonify({"ok": True})

    return bp

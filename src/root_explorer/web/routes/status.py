"""Status blueprint: uptime, root counts, recent warnings and errors."""

import threading
import time
from datetime import timedelta

from flask import Blueprint, jsonify

from root_explorer.logging_utils import error_buffer


def create_bp(orchestrator):
    """Create status blueprint with routes closed over orchestrator."""
    bp = Blueprint("status", __name__)

    @bp.route("/status")
    def status():
        uptime_seconds = orchestrator.uptime_seconds
        snapshot = orchestrator.registry.snapshot
        return jsonify({
            "online": True,
            "uptime_seconds": uptime_seconds,
            "uptime": str(timedelta(seconds=int(uptime_seconds))),
            "started_at": time.strftime(
                "%Y-%m-%d %H:%M:%S", time.localtime(orchestrator._start_time)
            ),
            "roots": {
                "system": len(snapshot.system),
                "user": len(snapshot.user),
                "legacy": len(snapshot.legacy),
                "missing": sum(1 for r in snapshot.all if not r.exists),
            },
            "metrics": {
                "active_sessions": len(orchestrator.sessions),
                "active_threads": threading.active_count(),
                "recent_errors": error_buffer.get_all()[:5],
            },
            "config": {
                "log_level": orchestrator.config.get("LOG_LEVEL", "INFO"),
                "max_tree_depth": orchestrator.config.get("MAX_TREE_DEPTH"),
                "preview_max_bytes": orchestrator.config.get("PREVIEW_MAX_BYTES"),
            },
        })

    return bp

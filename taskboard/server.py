#!/usr/bin/env python3
"""
Task Board Server
-----------------
JSON API in front of one in-process board. It is an input-layer adapter:
every route maps a browser gesture (drag start, hover, drop, confirm) onto
an InteractionSession call and answers with the fresh snapshot.

Usage:
    taskboard-server --port 3000
    TASKBOARD_API_SECRET=... taskboard-server --host 0.0.0.0

API:
    GET  /api/board              → { board, drag, pending_deletion, editing_task_id, lanes, stats }
    POST /api/tasks              → { text }
    PUT  /api/tasks/<id>         → { lane, text }
    POST /api/tasks/<id>/edit    → { } (enter edit mode)
    POST /api/tasks/<id>/edit/cancel  (leave edit mode without saving)
    POST /api/drag/begin         → { task_id }
    POST /api/drag/hover         → { task_id }
    POST /api/drag/leave         → { task_id }
    POST /api/drag/cancel
    POST /api/drop               → { task_id, from?, target: task|lane|trash, lane, target_task_id }
    POST /api/deletion/confirm
    POST /api/deletion/cancel
    GET  /health
"""

import argparse
import hmac
import logging
import sys
import threading
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, current_app

from .config import Config
from .schema import Lane, LANE_TITLES, UnknownLane
from .session import BoardContext, InteractionSession
from .store import BoardStore, make_id_generator

logger = logging.getLogger(__name__)

DROP_TARGETS = ("task", "lane", "trash")


# ── Auth ─────────────────────────────────────────────────────────────────────

def require_api_key(f):
    """Decorator: reject requests without a valid X-API-Key header."""
    @wraps(f)
    def decorated(*args, **kwargs):
        secret = current_app.config.get("API_SECRET", "")
        if not secret:
            return jsonify({"error": "API secret not set"}), 503
        provided = request.headers.get("X-API-Key", "").strip()
        if not hmac.compare_digest(provided, secret):
            code = 401 if not provided else 403
            return jsonify({"error": "Unauthorized"}), code
        return f(*args, **kwargs)
    return decorated


# ── App factory ──────────────────────────────────────────────────────────────

def create_app(config: Optional[Config] = None, session: Optional[InteractionSession] = None) -> Flask:
    config = config or Config.load()
    if session is None:
        store = BoardStore(make_id_generator(config.id_strategy))
        session = InteractionSession(BoardContext(store))

    app = Flask(__name__)
    app.config["API_SECRET"] = config.api_secret
    app.config["BOARD_SESSION"] = session
    # Flask serves on worker threads; the board core expects serial calls
    lock = threading.Lock()

    def board_payload(code: int = 200):
        ctx = session.context
        payload = ctx.snapshot()
        payload["lanes"] = [{"key": lane.value, "title": LANE_TITLES[lane]} for lane in Lane]
        payload["stats"] = {
            "total": ctx.board.count(),
            **{lane.value: len(tasks) for lane, tasks in ctx.board.lanes()},
        }
        payload["prompt"] = session.deletion_prompt()
        return jsonify(payload), code

    def body() -> dict:
        data = request.get_json(force=True, silent=True)
        # Only JSON objects carry fields; arrays and scalars count as empty
        return data if isinstance(data, dict) else {}

    @app.errorhandler(UnknownLane)
    def unknown_lane(e):
        return jsonify({"error": str(e)}), 400

    @app.route("/api/board")
    def api_board():
        with lock:
            return board_payload()

    @app.route("/api/tasks", methods=["POST"])
    @require_api_key
    def api_add_task():
        text = body().get("text", "")
        if not isinstance(text, str) or not text.strip():
            return jsonify({"error": "text is required"}), 400
        with lock:
            task = session.add_task(text)
            logger.info(f"Added task {task.id}")
            return board_payload(201)

    @app.route("/api/tasks/<task_id>", methods=["PUT"])
    @require_api_key
    def api_edit_task(task_id):
        data = body()
        text = data.get("text", "")
        if not isinstance(text, str):
            return jsonify({"error": "text must be a string"}), 400
        lane = Lane.from_str(data.get("lane", ""))
        with lock:
            if session.board.find(task_id, lane) is None:
                return jsonify({"error": "Task not found"}), 404
            session.edit_task(task_id, lane, text)
            return board_payload()

    @app.route("/api/tasks/<task_id>/edit", methods=["POST"])
    @require_api_key
    def api_begin_edit(task_id):
        with lock:
            if session.board.lane_of(task_id) is None:
                return jsonify({"error": "Task not found"}), 404
            session.begin_edit(task_id)
            return board_payload()

    @app.route("/api/tasks/<task_id>/edit/cancel", methods=["POST"])
    @require_api_key
    def api_cancel_edit(task_id):
        """Leave edit mode without saving (Escape in the card editor)."""
        with lock:
            if session.editing_task_id == task_id:
                session.end_edit()
            return board_payload()

    @app.route("/api/drag/<signal>", methods=["POST"])
    @require_api_key
    def api_drag(signal):
        task_id = body().get("task_id")
        with lock:
            if signal == "cancel":
                if session.drag.active:
                    logger.info(f"Drag of {session.drag.dragged_task_id} ended without a drop")
                session.cancel_drag()
                return board_payload()
            if not task_id:
                return jsonify({"error": "task_id is required"}), 400
            if signal == "begin":
                session.begin_drag(task_id)
            elif signal == "hover":
                session.hover_over(task_id)
            elif signal == "leave":
                session.clear_hover(task_id)
            else:
                return jsonify({"error": f"Unknown drag signal: {signal}"}), 404
            return board_payload()

    @app.route("/api/drop", methods=["POST"])
    @require_api_key
    def api_drop():
        data = body()
        target = data.get("target", "")
        if target not in DROP_TARGETS:
            return jsonify({"error": f"target must be one of {list(DROP_TARGETS)}"}), 400
        with lock:
            # "from" is optional; without it the card's current lane is used
            if data.get("from"):
                dropped_from = Lane.from_str(data["from"])
            else:
                dropped_from = session.board.lane_of(data.get("task_id", ""))
                if dropped_from is None:
                    return jsonify({"error": "Task not found"}), 404
            task = session.board.find(data.get("task_id", ""), dropped_from)
            if task is None:
                return jsonify({"error": "Task not found"}), 404
            if target == "trash":
                session.complete_drop_on_trash(task, dropped_from)
            elif target == "lane":
                session.complete_drop_on_lane(task, dropped_from, Lane.from_str(data.get("lane", "")))
            else:
                session.complete_drop_on_task(
                    task,
                    dropped_from,
                    Lane.from_str(data.get("lane", "")),
                    data.get("target_task_id"),
                )
            return board_payload()

    @app.route("/api/deletion/confirm", methods=["POST"])
    @require_api_key
    def api_confirm_deletion():
        with lock:
            pending = session.pending_deletion
            session.confirm_pending_deletion()
            if pending:
                logger.info(f"Deleted task {pending.task.id} from {pending.lane.value}")
            return board_payload()

    @app.route("/api/deletion/cancel", methods=["POST"])
    @require_api_key
    def api_cancel_deletion():
        with lock:
            session.cancel_pending_deletion()
            return board_payload()

    @app.route("/health")
    def health():
        return jsonify({"status": "ok", "tasks": session.board.count()})

    return app


# ── Main ─────────────────────────────────────────────────────────────────────

def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Task Board Server")
    parser.add_argument("--config", help="Path to taskboard.yaml (overrides TASKBOARD_CONFIG)")
    parser.add_argument("--host", help="Bind address (use 0.0.0.0 to expose on network)")
    parser.add_argument("--port", type=int)
    args = parser.parse_args(argv)

    config = Config.load(args.config)
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s [taskboard] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logger.info(f"Serving task board on http://{config.host}:{config.port} (ids: {config.id_strategy})")
    if not config.api_secret:
        logger.warning("No API secret configured; mutating routes will answer 503")

    app = create_app(config)
    app.run(host=config.host, port=config.port, debug=False, threaded=True)


if __name__ == "__main__":
    main()

from __future__ import annotations
from flask import Blueprint, current_app, jsonify

from routes import get_container

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    # lightweight liveness
    return "ok", 200, {"Content-Type": "text/plain; charset=utf-8"}


@bp.get("/version")
def version():
    s = get_container().settings
    info = {
        "model": s.OPENAI_MODEL,
        "enhance_model": s.ENHANCE_MODEL,
        "enhance_inputs": s.FF_ENHANCE_INPUTS,
    }
    return jsonify(info)


@bp.get("/ready")
def ready():
    try:
        c = get_container()
        configured = bool(getattr(c.completions, "api_key", True))
        return jsonify({"ready": True, "completions_configured": configured}), 200
    except RuntimeError as e:
        current_app.logger.error(f"Readiness check failed: {e}")
        return jsonify({"ready": False, "error": str(e)}), 503

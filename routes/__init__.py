"""
Route helpers.

Exports:
- get_container(): typed access to app.container
- json_body(): request JSON as a dict (400 on anything else)
"""

from __future__ import annotations
from typing import Any, Dict

from flask import abort, current_app, request


def get_container():
    c = getattr(current_app, "container", None)
    if c is None:
        raise RuntimeError("Container not initialized on app")
    return c


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, description="json_object_required")
    return data

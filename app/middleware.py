"""
Middleware installers for Flask.

- Request ID injection
- IP-based rate limiting (token bucket per remote address + path)
- Timing log per request
"""

from __future__ import annotations
import logging
import time
import uuid

from flask import Flask, g, request, abort

from service.rate_limit import RateLimiter

logger = logging.getLogger("Runtime")

# health checks are never limited
_UNLIMITED = {"/health", "/ready", "/version"}


def install_request_id(app: Flask) -> None:
    @app.before_request
    def _req_id():
        g.request_id = request.headers.get("X-Request-ID") or f"req_{uuid.uuid4().hex[:12]}"

    @app.after_request
    def _stamp(response):
        response.headers["X-Request-ID"] = g.get("request_id", "-")
        return response


def install_rate_limit(app: Flask, limiter: RateLimiter) -> None:
    # in-proc limiter; each gunicorn worker keeps its own buckets
    @app.before_request
    def _rl():
        if request.path in _UNLIMITED:
            return
        # remote_addr is rewritten by ProxyFix only when PROXY_HOPS is set
        ip = request.remote_addr or "unknown"
        if not limiter.allow(f"ip:{ip}:{request.path}"):
            logger.warning("rate limited ip=%s path=%s", ip, request.path)
            abort(429)


def install_timing_log(app: Flask) -> None:
    @app.before_request
    def _start_timer():
        g._t0 = time.time()

    @app.after_request
    def _stop_timer(response):
        t0 = getattr(g, "_t0", None)
        if t0 is not None:
            dt = int((time.time() - t0) * 1000)
            logger.info("%s %s -> %s in %dms", request.method, request.path, response.status_code, dt)
        return response

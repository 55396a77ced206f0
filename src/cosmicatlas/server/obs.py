"""Per-request logging hooks for the Flask app."""

from __future__ import annotations

import time
import uuid

from flask import Flask, Response, g, request

from cosmicatlas.logging import get_logger

LOGGER = get_logger("cosmicatlas.server.access")


def install_request_logging(app: Flask) -> None:
    @app.before_request
    def _start_timer() -> None:
        g.req_id = request.headers.get("X-Request-ID", str(uuid.uuid4())[:8])
        g.t0 = time.time()
        LOGGER.info(f"[{g.req_id}] --> {request.method} {request.path}", extra={"query": dict(request.args)})

    @app.after_request
    def _log_response(resp: Response) -> Response:
        dt = (time.time() - getattr(g, "t0", time.time())) * 1000.0
        rid = getattr(g, "req_id", "-")
        resp.headers["X-Request-ID"] = rid
        LOGGER.info(f"[{rid}] <-- {resp.status_code} {request.method} {request.path} {dt:.1f}ms")
        return resp

    @app.teardown_request
    def _teardown(exc) -> None:
        if exc:
            LOGGER.error(f"[{getattr(g, 'req_id', '-')}] request failed", exc_info=exc)

# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""One start line and one end line per request, tagged with a correlation id.

The id comes from ``X-Request-ID`` when the caller sends one and is echoed
back on the response. The user id is only known once an ``Authenticate``
stage has run, so it appears on the end line but never on the start line.
"""

from __future__ import annotations

import re
import secrets
import time

from flask import Flask, Response, g, request

from jobgraph.shared.config import AppConfig
from jobgraph.shared.logging import clear_correlation_id, get_correlation_id, logger, set_correlation_id

from .rate_limit import client_ip

_REQUEST_ID_HEADER = "X-Request-ID"
_VALID_REQUEST_ID = re.compile(r"^[\w\-.]{1,64}$")


def _incoming_request_id() -> str:
    candidate = request.headers.get(_REQUEST_ID_HEADER, "")
    if _VALID_REQUEST_ID.match(candidate):
        return candidate
    return secrets.token_urlsafe(8)


def configure_request_logging(app: Flask, config: AppConfig) -> None:
    from jobgraph.infrastructure.observability import observe_request

    verbose = config.debug_logging

    @app.before_request
    def _start() -> None:
        set_correlation_id(_incoming_request_id())
        g.request_started = time.perf_counter()
        if verbose:
            logger.debug(
                f"http: --> {request.method} {request.path} ip={client_ip(request)} "
                f"agent={request.user_agent.string[:80]!r} bytes={request.content_length or 0}"
            )
        else:
            logger.info(f"http: --> {request.method} {request.path} ip={client_ip(request)}")

    @app.after_request
    def _finish(response: Response) -> Response:
        duration = time.perf_counter() - g.get("request_started", time.perf_counter())
        logger.info(
            f"http: <-- {request.method} {request.path} status={response.status_code} "
            f"{duration * 1000:.1f}ms user={g.get('user_id', '-')}"
        )
        endpoint = request.url_rule.rule if request.url_rule else "unmatched"
        observe_request(endpoint, response.status_code, duration)
        response.headers[_REQUEST_ID_HEADER] = get_correlation_id()
        return response

    @app.teardown_request
    def _teardown(exc: BaseException | None) -> None:
        if exc is not None:
            logger.error(f"http: {type(exc).__name__} escaped {request.method} {request.path}")
        clear_correlation_id()


__all__ = ["configure_request_logging"]

# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, g, jsonify, request
from werkzeug.exceptions import HTTPException

from jobgraph.shared.config import load_config
from jobgraph.shared.logging import logger

from .base import AppError


def success_response(data: Any, status: HTTPStatus = HTTPStatus.OK) -> tuple[Response, HTTPStatus]:
    return jsonify({"success": True, "data": data}), status


def handle_app_error(error: AppError) -> tuple[Response, HTTPStatus]:
    response = jsonify(error.to_dict())
    if error.status == HTTPStatus.UNAUTHORIZED:
        response.headers["WWW-Authenticate"] = "Bearer"
    return response, error.status


def _http_error_code(exc: HTTPException) -> str:
    name = re.sub(r"[^A-Za-z0-9]+", "_", exc.name or "http_error").strip("_")
    return name.upper()


def register_error_handler(
    app: Flask, *, default_status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
) -> None:
    config = load_config()
    debug_mode = config.debug_logging

    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        from jobgraph.infrastructure.observability import record_auth_failure

        if exc.status in (HTTPStatus.UNAUTHORIZED, HTTPStatus.FORBIDDEN):
            record_auth_failure(exc.code)
        if exc.status >= HTTPStatus.INTERNAL_SERVER_ERROR:
            logger.error(f"Internal error {exc.code} on {request.method} {request.path}")
        else:
            logger.info(f"Handled error {exc.code} on {request.method} {request.path}")
        return handle_app_error(exc)

    @app.errorhandler(HTTPException)
    def _handle_http(exc: HTTPException):
        payload = {
            "success": False,
            "error": {"code": _http_error_code(exc), "message": exc.description or exc.name},
        }
        return jsonify(payload), exc.code or HTTPStatus.INTERNAL_SERVER_ERROR

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        ip_address = request.remote_addr or "unknown"
        user_id = getattr(g, "user_id", None)

        if debug_mode:
            logger.exception(
                f"Unhandled exception: {request.method} {request.path} "
                f"from {ip_address}, user={user_id}, "
                f"query={dict(request.args)}, body_size={len(request.data)}"
            )
        else:
            logger.error(f"Error: {type(exc).__name__} on {request.method} {request.path}")

        response = jsonify(
            {
                "success": False,
                "error": {"code": "INTERNAL_ERROR", "message": "An internal error occurred"},
            }
        )
        return response, default_status

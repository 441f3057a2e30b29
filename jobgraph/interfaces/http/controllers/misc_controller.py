# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from jobgraph.infrastructure.health import check_database
from jobgraph.shared.logging import logger


class MiscController:
    def __init__(self, *, engine: Engine, metrics_enabled: bool = True) -> None:
        self._engine = engine
        self._metrics_enabled = metrics_enabled

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("misc", __name__)
        bp.add_url_rule("/api/health", view_func=self.health, methods=["GET"])
        if self._metrics_enabled:
            bp.add_url_rule("/api/metrics", view_func=self.metrics, methods=["GET"])
        return bp

    def health(self):
        status: dict[str, object] = {"ok": True}
        try:
            check_database(self._engine)
            status["database"] = "ok"
        except SQLAlchemyError as exc:
            logger.error(f"health: database probe failed: {type(exc).__name__}")
            status["ok"] = False
            status["database"] = "error"
        return jsonify({"success": True, "data": status}), (200 if status["ok"] else 503)

    def metrics(self):
        return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)

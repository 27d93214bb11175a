from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, json_body, login_required
from ..container import Container
from .model import QuarterWindowUpdate


def register(app: Flask, container: Container) -> None:
    @app.route(
        "/api/cycles/<int:cycle_id>/quarters/<int:quarter>/window",
        methods=["GET"],
        endpoint="quarter_window_get",
    )
    @login_required
    def quarter_window_get(cycle_id: int, quarter: int):
        window = container.window_store.get_quarter_window(cycle_id, quarter)
        return jsonify({"data": window.to_dict()})

    @app.route(
        "/api/cycles/<int:cycle_id>/quarters/<int:quarter>/window",
        methods=["PUT"],
        endpoint="quarter_window_put",
    )
    @admin_required
    def quarter_window_put(cycle_id: int, quarter: int):
        update = QuarterWindowUpdate.from_mapping(json_body())
        window = container.window_store.upsert_quarter_window(cycle_id, quarter, update)
        return jsonify({"data": window.to_dict(), "message": "Quarter window saved"})

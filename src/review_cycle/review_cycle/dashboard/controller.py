from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import today_local
from ..common.http import current_user_id, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/cycles/active/dashboard", methods=["GET"], endpoint="manager_dashboard_active")
    @login_required
    def manager_dashboard_active():
        dashboard = container.dashboard.get_active_manager_dashboard(current_user_id(), today=today_local())
        if dashboard is None:
            return jsonify({"error": "No active cycle found"}), 404
        return jsonify({"data": dashboard.to_dict()})

    @app.route("/api/cycles/<int:cycle_id>/dashboard", methods=["GET"], endpoint="manager_dashboard")
    @login_required
    def manager_dashboard(cycle_id: int):
        dashboard = container.dashboard.get_manager_dashboard(current_user_id(), cycle_id, today=today_local())
        return jsonify({"data": dashboard.to_dict()})

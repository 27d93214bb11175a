from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import today_local
from ..common.http import admin_required, int_arg
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/permissions/late-submission-details", methods=["GET"], endpoint="late_submission_details")
    @admin_required
    def late_submission_details():
        report = container.compliance_service.get_late_submission_stats(
            int_arg("cycle_id", required=True),
            request.args.get("quarter"),
            request.args.get("kind"),
            today=today_local(),
        )
        return jsonify({"data": report.to_dict()})

    @app.route("/api/permissions/late-submission/roster", methods=["GET"], endpoint="late_submission_roster")
    @admin_required
    def late_submission_roster():
        rows = container.compliance_service.get_late_submission_roster(
            int_arg("cycle_id", required=True),
            request.args.get("quarter"),
            request.args.get("kind"),
            today=today_local(),
            employee_id=int_arg("employee_id"),
        )
        return jsonify({"data": [r.to_dict() for r in rows]})

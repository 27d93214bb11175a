from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Union

from flask import Flask, jsonify, request

from ..common.datetime_utils import coerce_date, now_local
from ..common.http import admin_required, current_role, current_user_id, int_arg, json_body, login_required
from ..common.validators import require_positive_id
from ..container import Container
from ..core.exceptions import ValidationError


def _expiry(value: Any) -> Optional[Union[date, datetime]]:
    # "2026-06-30T17:00:00" keeps its time; "2026-06-30" means end of that day.
    if isinstance(value, str) and "T" in value:
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError("expires_at must be an ISO date or datetime", field="expires_at")
        # Stored and compared as naive local time.
        return parsed.astimezone().replace(tzinfo=None) if parsed.tzinfo else parsed
    return coerce_date(value, "expires_at")


def register(app: Flask, container: Container) -> None:
    service = container.permission_service

    @app.route("/api/permissions/late-submission", methods=["GET"], endpoint="late_permissions_list")
    @admin_required
    def late_permissions_list():
        now = now_local()
        rows = service.list_permissions(
            current_role=current_role(),
            now=now,
            cycle_id=int_arg("cycle_id"),
            employee_id=int_arg("employee_id"),
            active_only=request.args.get("active") in {"1", "true", "yes"},
        )
        return jsonify({"data": [p.to_dict(now) for p in rows]})

    @app.route("/api/permissions/late-submission/check", methods=["GET"], endpoint="late_permission_check")
    @login_required
    def late_permission_check():
        now = now_local()
        result = service.check(
            employee_id=current_user_id(),
            cycle_id=int_arg("cycle_id", required=True),
            now=now,
            quarter=request.args.get("quarter"),
        )
        return jsonify(
            {
                "has_permission": result.has_permission,
                "permission": result.permission.to_dict(now) if result.permission else None,
            }
        )

    @app.route(
        "/api/permissions/late-submission/<int:permission_id>", methods=["GET"], endpoint="late_permission_get"
    )
    @admin_required
    def late_permission_get(permission_id: int):
        permission = service.get(current_role=current_role(), permission_id=permission_id)
        return jsonify({"data": permission.to_dict(now_local())})

    @app.route("/api/permissions/late-submission", methods=["POST"], endpoint="late_permission_grant")
    @admin_required
    def late_permission_grant():
        data = json_body()
        now = now_local()
        permission = service.grant(
            current_role=current_role(),
            granted_by=current_user_id(),
            employee_id=require_positive_id(data.get("employee_id"), "employee_id"),
            cycle_id=require_positive_id(data.get("cycle_id"), "cycle_id"),
            quarter=data.get("quarter"),
            now=now,
            reason=data.get("reason"),
            expires_at=_expiry(data.get("expires_at")),
        )
        return jsonify({"data": permission.to_dict(now), "message": "Late submission permission granted"}), 201

    @app.route(
        "/api/permissions/late-submission/<int:permission_id>", methods=["PUT"], endpoint="late_permission_update"
    )
    @admin_required
    def late_permission_update(permission_id: int):
        data = json_body()
        now = now_local()
        permission = service.update(
            current_role=current_role(),
            permission_id=permission_id,
            now=now,
            reason=data.get("reason"),
            expires_at=_expiry(data.get("expires_at")),
        )
        return jsonify({"data": permission.to_dict(now), "message": "Late submission permission updated"})

    @app.route(
        "/api/permissions/late-submission/<int:permission_id>", methods=["DELETE"], endpoint="late_permission_revoke"
    )
    @admin_required
    def late_permission_revoke(permission_id: int):
        now = now_local()
        permission = service.revoke(current_role=current_role(), permission_id=permission_id, now=now)
        return jsonify({"data": permission.to_dict(now), "message": "Late submission permission revoked"})

    @app.route(
        "/api/permissions/late-submission/<int:cycle_id>/<int:employee_id>/revoke",
        methods=["PUT"],
        endpoint="late_permission_revoke_for",
    )
    @admin_required
    def late_permission_revoke_for(cycle_id: int, employee_id: int):
        now = now_local()
        revoked = service.revoke_for(
            current_role=current_role(),
            cycle_id=cycle_id,
            employee_id=employee_id,
            now=now,
            quarter=json_body().get("quarter"),
        )
        return jsonify(
            {
                "data": [p.to_dict(now) for p in revoked],
                "message": f"Revoked {len(revoked)} late submission permission(s)",
            }
        )

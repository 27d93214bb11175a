from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, session

from ..core.enums import ADMIN_ROLES, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError


def current_role() -> Role:
    try:
        return Role(session.get("role"))
    except ValueError:
        raise AuthorizationError("Unknown role")


def current_user_id() -> int:
    return int(session["user_id"])


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"error": "Authentication required"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"error": "Authentication required"}), 401
        if session.get("role") not in {r.value for r in ADMIN_ROLES}:
            return jsonify({"error": "Insufficient permissions"}), 403
        return view(*args, **kwargs)

    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be an object")
    return data


def int_arg(name: str, *, required: bool = False) -> Optional[int]:
    raw = request.args.get(name)
    if raw is None or raw == "":
        if required:
            raise ValidationError(f"{name} is required", field=name)
        return None
    if not raw.isdigit():
        raise ValidationError(f"{name} must be an integer", field=name)
    return int(raw)


def register_error_handlers(app: Flask) -> None:
    """Translate domain errors raised by services into JSON responses."""

    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return jsonify(e.to_dict()), 400

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return jsonify({"error": str(e)}), 404

    @app.errorhandler(ConflictError)
    def _conflict(e: ConflictError):
        return jsonify({"error": str(e)}), 409

    @app.errorhandler(AuthorizationError)
    def _forbidden(e: AuthorizationError):
        return jsonify({"error": str(e)}), 403

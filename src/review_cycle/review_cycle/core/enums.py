from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Application roles used for authorization checks."""

    EMPLOYEE = "employee"
    MANAGER = "manager"
    HR_ADMIN = "hr_admin"
    SYSTEM_ADMIN = "system_admin"


ADMIN_ROLES = frozenset({Role.HR_ADMIN, Role.SYSTEM_ADMIN})


class CycleStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    CLOSED = "closed"
    ARCHIVED = "archived"


class WindowStatus(str, Enum):
    """Publication state of a quarter goal window."""

    DRAFT = "draft"
    OPEN = "open"
    CLOSED = "closed"


class WindowKind(str, Enum):
    GOAL = "goal"
    REVIEW = "review"


class SubmissionKind(str, Enum):
    """What an employee submits against a deadline."""

    GOAL = "goal"
    SELF_REVIEW = "self-review"


class GoalStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    RETURNED = "returned"
    LOCKED = "locked"


class PermissionState(str, Enum):
    """Lifecycle of a late-submission permission: none -> granted -> revoked/expired."""

    GRANTED = "granted"
    REVOKED = "revoked"
    EXPIRED = "expired"

"""Write-path validation rules."""

from __future__ import annotations

import re

from .exceptions import ValidationError
from .models import CreateFeatureFlagRequest, UpdateFeatureFlagRequest
from .plans import PLAN_HIERARCHY, is_known_plan

MAX_KEY_LENGTH = 100

_KEY_RE = re.compile(r"[a-z0-9_]+")


def is_valid_key(candidate: str) -> bool:
    """Return True if candidate is 1-100 chars of lowercase letters, digits or underscores."""
    if not candidate or len(candidate) > MAX_KEY_LENGTH:
        return False
    return _KEY_RE.fullmatch(candidate) is not None


def validate_key(key: str) -> None:
    """Validate flag key format."""
    if not is_valid_key(key):
        raise ValidationError(
            "key",
            "Invalid key format. Use lowercase letters, digits and underscores only "
            f"(1-{MAX_KEY_LENGTH} chars): {key!r}",
            code="INVALID_KEY",
        )


def validate_rollout_percentage(percentage: int) -> None:
    """Validate rollout percentage (integer 0-100)."""
    if not isinstance(percentage, int) or isinstance(percentage, bool):
        raise ValidationError(
            "rollout_percentage",
            f"Rollout percentage must be an integer, got {percentage!r}",
            code="INVALID_ROLLOUT_PERCENTAGE",
        )
    if percentage < 0 or percentage > 100:
        raise ValidationError(
            "rollout_percentage",
            f"Rollout percentage must be between 0 and 100, got {percentage}",
            code="INVALID_ROLLOUT_PERCENTAGE",
        )


def validate_min_plan(plan: str) -> None:
    """Validate minimum plan against the plan hierarchy (case-sensitive)."""
    if not is_known_plan(plan):
        allowed = ", ".join(repr(p) for p in PLAN_HIERARCHY)
        raise ValidationError(
            "min_plan",
            f"Invalid plan {plan!r}, must be one of {allowed}",
            code="INVALID_MIN_PLAN",
        )


def validate_user_id(user_id: int) -> None:
    """Validate user id (positive integer)."""
    if user_id < 1:
        raise ValidationError(
            "user_id",
            f"Invalid user ID: {user_id}",
            code="INVALID_USER_ID",
        )


def validate_create_request(req: CreateFeatureFlagRequest) -> None:
    """Validate a flag creation request."""
    validate_key(req.key)
    validate_rollout_percentage(req.rollout_percentage)
    validate_min_plan(req.min_plan)


def validate_update_request(req: UpdateFeatureFlagRequest) -> None:
    """Validate the fields present in a partial update request."""
    if req.rollout_percentage is not None:
        validate_rollout_percentage(req.rollout_percentage)
    if req.min_plan is not None:
        validate_min_plan(req.min_plan)

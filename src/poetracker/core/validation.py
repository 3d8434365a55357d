"""
Input validation functions for the PoE tracker.

All validation functions follow the pattern:
1. Accept raw user input
2. Normalize/clean the input
3. Validate against business rules
4. Return cleaned value or raise ValidationError
"""

import re
from collections.abc import Mapping
from typing import Any

from poetracker.core.errors import ValidationError

# ============================================================================
# Credentials
# ============================================================================


def validate_username(username: str | None) -> str:
    """
    Validate and normalize a username.

    Args:
        username: Raw username input

    Returns:
        Stripped username

    Raises:
        ValidationError: If too short or not alphanumeric-with-underscores
    """
    if username is None or username.strip() == "":
        raise ValidationError("Username cannot be empty", field="username")

    cleaned = username.strip()

    if len(cleaned) < 3:
        raise ValidationError("Username too short, should be at least 3 chars", field="username")

    if len(cleaned) > 50:
        raise ValidationError("Username cannot exceed 50 characters", field="username")

    if not re.fullmatch(r"[A-Za-z][A-Za-z0-9_.]*", cleaned):
        raise ValidationError(
            "Username should start with a letter and contain only letters, digits, '_' or '.'",
            field="username",
        )

    return cleaned


def validate_password(password: str | None, username: str | None = None) -> str:
    """
    Basic password sanity check: not too short and not equal to the username.

    Raises:
        ValidationError: If the password is unacceptable
    """
    if password is None or password == "":
        raise ValidationError("Password cannot be empty", field="password")

    if len(password) < 6:
        raise ValidationError("Password too short, should be at least 6 chars", field="password")

    if username is not None and password.lower() == username.lower():
        raise ValidationError("Password is too close to the username", field="password")

    return password


# ============================================================================
# Submissions
# ============================================================================


def validate_title(title: str | None) -> str:
    """Strip a submission title; whitespace-only titles are rejected."""
    if title is None or title.strip() == "":
        raise ValidationError("Title cannot be empty", field="title")

    return title.strip()


# ============================================================================
# Criteria Checklists
# ============================================================================


def validate_assessment_criteria(
    criteria: Mapping[str, Any] | None, template: Mapping[str, Any] | None
) -> dict[str, Any]:
    """
    Check a completed checklist against the task's criteria template.

    Every label in ``criteria`` must exist in ``template`` when the task defines
    one. Labels left out are treated as not met.

    Args:
        criteria: Assessor's completed checklist
        template: Task criteria (label → expectation)

    Returns:
        Checklist with blank labels stripped

    Raises:
        ValidationError: If a label is unknown or blank
    """
    if not criteria:
        return {}

    cleaned: dict[str, Any] = {}
    for label, value in criteria.items():
        key = label.strip()
        if key == "":
            raise ValidationError("Criterion labels cannot be blank", field="criteria")
        cleaned[key] = value

    if template:
        unknown = [label for label in cleaned if label not in template]
        if unknown:
            raise ValidationError(
                f"Unknown criteria for this task: {', '.join(sorted(unknown))}",
                field="criteria",
            )

    return cleaned


def criterion_met(value: Any) -> bool:
    """Read a checklist value as met / not met."""
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "met", "1"}
    return bool(value)

"""Field-level validation for inbound payloads.

Each validator is a pure function over a plain mapping and returns the list
of field errors it found; an empty list means the payload is acceptable.
Routes call them explicitly and raise ``InvalidRequestError`` on failure.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Final

from registry_api.core.errors import FieldError, InvalidRequestError

_EMAIL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_DIGITS_PATTERN: Final[re.Pattern[str]] = re.compile(r"[0-9]+")

_MISSING = object()

# Fields a client may never set; they are owned by the server-side workflow.
INSTITUTION_PROTECTED_FIELDS: Final[frozenset[str]] = frozenset({"role", "status", "owner_id"})
USER_PROTECTED_FIELDS: Final[frozenset[str]] = frozenset({"role", "is_admin"})


@dataclass(frozen=True, slots=True)
class _Rule:
    required: bool = True
    min_length: int | None = None
    max_length: int | None = None
    pattern: re.Pattern[str] | None = None
    pattern_message: str = "has an invalid format"


INSTITUTION_RULES: Final[Mapping[str, _Rule]] = {
    "name": _Rule(min_length=3, max_length=80),
    "email": _Rule(max_length=120, pattern=_EMAIL_PATTERN, pattern_message="must be a valid email"),
    "account_number": _Rule(min_length=3, max_length=80),
    "address": _Rule(min_length=3, max_length=80),
    "phone": _Rule(
        min_length=3,
        max_length=15,
        pattern=_DIGITS_PATTERN,
        pattern_message="may only contain digits",
    ),
    "logo": _Rule(required=False, max_length=255),
    "banner": _Rule(required=False, max_length=255),
}

USER_RULES: Final[Mapping[str, _Rule]] = {
    "name": _Rule(min_length=3, max_length=50),
    "lastname": _Rule(min_length=3, max_length=50),
    "email": _Rule(max_length=120, pattern=_EMAIL_PATTERN, pattern_message="must be a valid email"),
    "dni": _Rule(required=False, min_length=7, max_length=8),
    "address": _Rule(required=False, max_length=80),
    "phone": _Rule(
        required=False,
        max_length=15,
        pattern=_DIGITS_PATTERN,
        pattern_message="may only contain digits",
    ),
    "img_profile": _Rule(required=False, min_length=3, max_length=130),
    "institution_id": _Rule(required=False, max_length=36),
}


def _check_field(field: str, value: Any, rule: _Rule) -> FieldError | None:
    if value is _MISSING or value is None:
        if rule.required:
            return FieldError(field, "is required")
        return None
    if not isinstance(value, str):
        return FieldError(field, "must be a string")
    if rule.required and not value.strip():
        return FieldError(field, "must not be empty")
    if rule.min_length is not None and len(value) < rule.min_length:
        return FieldError(field, f"must be at least {rule.min_length} characters")
    if rule.max_length is not None and len(value) > rule.max_length:
        return FieldError(field, f"must be at most {rule.max_length} characters")
    if rule.pattern is not None and not rule.pattern.fullmatch(value):
        return FieldError(field, rule.pattern_message)
    return None


def _check_protected(data: Mapping[str, Any], protected: Iterable[str]) -> list[FieldError]:
    return [
        FieldError(field, "cannot be set by the client")
        for field in sorted(protected)
        if field in data
    ]


def _check_unknown(data: Mapping[str, Any], allowed: Iterable[str]) -> list[FieldError]:
    known = set(allowed)
    return [FieldError(field, "is not a recognised field") for field in data if field not in known]


def validate_institution_signup(data: Mapping[str, Any] | None) -> list[FieldError]:
    if data is None:
        return [FieldError("body", "is required")]

    errors: list[FieldError] = []
    for field, rule in INSTITUTION_RULES.items():
        error = _check_field(field, data.get(field, _MISSING), rule)
        if error is not None:
            errors.append(error)
    errors.extend(_check_protected(data, INSTITUTION_PROTECTED_FIELDS))
    errors.extend(_check_unknown(data, INSTITUTION_RULES.keys() | INSTITUTION_PROTECTED_FIELDS))
    return errors


def validate_institution_patch(data: Mapping[str, Any] | None) -> list[FieldError]:
    if not data:
        return [FieldError("body", "must contain at least one field")]

    errors = _check_protected(data, INSTITUTION_PROTECTED_FIELDS)
    errors.extend(_check_unknown(data, INSTITUTION_RULES.keys() | INSTITUTION_PROTECTED_FIELDS))
    for field, value in data.items():
        rule = INSTITUTION_RULES.get(field)
        if rule is None:
            continue
        # Optional image references may be cleared with null; everything else must stay set.
        if value is None and not rule.required:
            continue
        error = _check_field(field, value, rule)
        if error is not None:
            errors.append(error)
    return errors


def validate_user_signup(data: Mapping[str, Any] | None) -> list[FieldError]:
    if data is None:
        return [FieldError("body", "is required")]

    errors: list[FieldError] = []
    for field, rule in USER_RULES.items():
        error = _check_field(field, data.get(field, _MISSING), rule)
        if error is not None:
            errors.append(error)
    errors.extend(_check_protected(data, USER_PROTECTED_FIELDS))
    errors.extend(_check_unknown(data, USER_RULES.keys() | USER_PROTECTED_FIELDS))
    return errors


def ensure_valid(errors: list[FieldError]) -> None:
    if errors:
        raise InvalidRequestError("Validation failed", errors=errors)


__all__ = [
    "INSTITUTION_PROTECTED_FIELDS",
    "USER_PROTECTED_FIELDS",
    "ensure_valid",
    "validate_institution_patch",
    "validate_institution_signup",
    "validate_user_signup",
]

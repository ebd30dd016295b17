from __future__ import annotations

from typing import Any

from core.persistence.errors import ValidationError
from core.types import SUBTITLE_MAX_LENGTH, TITLE_MAX_LENGTH

# None means unbounded.
FIELD_LIMITS: dict[str, int | None] = {
    "title": TITLE_MAX_LENGTH,
    "subtitle": SUBTITLE_MAX_LENGTH,
    "body": None,
}


def _check_field(name: str, value: Any) -> str:
    if value is None:
        raise ValidationError(f"{name} is required", field=name)
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string", field=name)
    # PostgreSQL text columns take neither NUL nor lone surrogates.
    if "\x00" in value:
        raise ValidationError(f"{name} must not contain NUL characters", field=name)
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise ValidationError(f"{name} must be valid UTF-8 text", field=name) from None

    limit = FIELD_LIMITS[name]
    # Characters, same as VARCHAR(n) in PostgreSQL.
    if limit is not None and len(value) > limit:
        raise ValidationError(f"{name} must be at most {limit} characters (got {len(value)})", field=name)
    return value


def validate_new_post(*, title: Any, subtitle: Any, body: Any) -> dict[str, str]:
    """Validate the fields of a post about to be created.

    Empty strings are accepted; only absence, wrong type and length are rejected.
    """
    return {
        "title": _check_field("title", title),
        "subtitle": _check_field("subtitle", subtitle),
        "body": _check_field("body", body),
    }


def validate_post_changes(
    *,
    title: Any = None,
    subtitle: Any = None,
    body: Any = None,
) -> dict[str, str]:
    """Validate the supplied fields of an update.

    Fields passed as None are treated as not supplied and left out of the result.
    """
    changes: dict[str, str] = {}
    for name, value in (("title", title), ("subtitle", subtitle), ("body", body)):
        if value is not None:
            changes[name] = _check_field(name, value)
    return changes

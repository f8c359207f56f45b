"""Input validation helpers shared by the API groups."""

import re
from typing import Any, Iterable, Optional, Sequence, Union
from urllib.parse import urlparse

from ..exceptions import ValidationError


# v1 torrents use SHA-1 infohashes, v2 torrents SHA-256
HASH_PATTERN = re.compile(r"^(?:[0-9a-fA-F]{40}|[0-9a-fA-F]{64})$")

ALL_TORRENTS = "all"


def require_non_empty(value: Optional[str], field: str = "value") -> str:
    """
    Ensure a string argument is present and not blank.

    Args:
        value: Value to check
        field: Field name used in the error

    Returns:
        The stripped value

    Raises:
        ValidationError: If value is None or blank
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} cannot be empty", field=field, value=value)
    return value.strip()


def validate_hash(value: Optional[str], field: str = "hash") -> str:
    """
    Validate a single torrent infohash.

    Args:
        value: 40 (v1) or 64 (v2) character hex string
        field: Field name used in the error

    Returns:
        Lower-cased hash
    """
    value = require_non_empty(value, field)
    if not HASH_PATTERN.match(value):
        raise ValidationError(
            f"{field} must be a 40 or 64 character hex string", field=field, value=value
        )
    return value.lower()


def validate_hashes(
    hashes: Union[str, Iterable[str], None], field: str = "hashes"
) -> str:
    """
    Validate and join torrent hashes for the ``hashes`` form field.

    Accepts ``"all"``, a single hash, a pipe separated string or an
    iterable of hashes.

    Returns:
        Pipe separated hashes, or ``"all"``
    """
    if isinstance(hashes, str):
        if hashes.strip().lower() == ALL_TORRENTS:
            return ALL_TORRENTS
        items = [h for h in hashes.split("|") if h.strip()]
    elif hashes is None:
        items = []
    else:
        items = list(hashes)

    if not items:
        raise ValidationError(f"{field} cannot be empty", field=field, value=hashes)

    return "|".join(validate_hash(h, field) for h in items)


def validate_rid(rid: Any) -> int:
    """Validate a sync response id (non-negative integer)."""
    if isinstance(rid, bool) or not isinstance(rid, int):
        raise ValidationError("rid must be an integer", field="rid", value=rid)
    if rid < 0:
        raise ValidationError("rid must be >= 0", field="rid", value=rid)
    return rid


def validate_url(value: Optional[str], field: str = "url") -> str:
    """Validate an http(s) URL with a host."""
    value = require_non_empty(value, field)
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(
            f"{field} must be an http(s) URL", field=field, value=value
        )
    return value


def validate_int_range(
    value: Any,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
    field: str = "value",
) -> int:
    """Validate an integer within optional bounds."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer", field=field, value=value)
    if minimum is not None and value < minimum:
        raise ValidationError(f"{field} must be >= {minimum}", field=field, value=value)
    if maximum is not None and value > maximum:
        raise ValidationError(f"{field} must be <= {maximum}", field=field, value=value)
    return value


def validate_choice(value: Any, choices: Sequence[Any], field: str = "value") -> Any:
    """Validate that value is one of the allowed choices."""
    if value not in choices:
        allowed = ", ".join(str(c) for c in choices)
        raise ValidationError(
            f"{field} must be one of: {allowed}", field=field, value=value
        )
    return value


def join_values(
    values: Union[str, Iterable[str], None], separator: str, field: str = "value"
) -> str:
    """
    Join a list form field (tags, urls, indexes) into one string.

    Args:
        values: Single string or iterable of strings
        separator: Separator the endpoint expects ("," or "|" or newline)
        field: Field name used in the error

    Returns:
        Joined string
    """
    if isinstance(values, str):
        items = [values]
    elif values is None:
        items = []
    else:
        items = [str(v) for v in values]

    items = [v.strip() for v in items if v and v.strip()]
    if not items:
        raise ValidationError(f"{field} cannot be empty", field=field, value=values)
    return separator.join(items)

"""Catalog identifier helpers."""

import re
from typing import Any, Optional

from resonance.errors import InvalidCatalogIdError

_NUMERIC_ID_RE = re.compile(r"^[0-9]+$")


def parse_catalog_id(value: Any) -> str:
    """Return the canonical string form of a catalog id.

    Catalog ids are positive integers; leading zeros and surrounding
    whitespace are dropped so that ``" 0042"`` and ``"42"`` name the same
    record.

    Raises:
        InvalidCatalogIdError: if the value is blank, non-numeric or zero
    """
    if value is None or isinstance(value, bool):
        raise InvalidCatalogIdError(value)

    text = str(value).strip()
    if not _NUMERIC_ID_RE.match(text):
        raise InvalidCatalogIdError(value)

    canonical = text.lstrip("0")
    if not canonical:
        raise InvalidCatalogIdError(value)
    return canonical


def is_catalog_id(value: Any) -> bool:
    """Check whether a value parses as a catalog id."""
    try:
        parse_catalog_id(value)
    except InvalidCatalogIdError:
        return False
    return True


def safe_catalog_id(value: Any) -> Optional[str]:
    """Like parse_catalog_id, but returns None instead of raising."""
    try:
        return parse_catalog_id(value)
    except InvalidCatalogIdError:
        return None

"""
Read-only field lookup on loosely shaped Shopify records.
"""

from typing import Any, Mapping, Optional, Sequence

# "variants[0].barcode" means: first element of variants, then its barcode
FIRST_ELEMENT_MARKER = "[0]."


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _get_key(record: Any, key: str) -> Optional[Any]:
    if not isinstance(record, Mapping):
        return None
    return record.get(key)


def read_path(record: Any, path: Optional[str]) -> Optional[Any]:
    """
    Read a field from a source record.

    A plain path reads a top-level key. A path containing "[0]." reads the
    first element of the array field before the marker, then the nested key
    after it. Missing or empty values at any level return None.

    Args:
        record: Product record (dict-like)
        path: Field path, e.g. "title" or "variants[0].barcode"

    Returns:
        The value found, or None
    """
    if not path:
        return None

    # Only one marker is supported; anything after it is read as a single
    # key, so "a[0].b[0].c" looks up the literal key "b[0].c" and yields None.
    if FIRST_ELEMENT_MARKER in path:
        base_field, nested_field = path.split(FIRST_ELEMENT_MARKER, 1)
        items = _get_key(record, base_field)
        if isinstance(items, (str, bytes)) or not isinstance(items, Sequence) or not items:
            return None
        value = _get_key(items[0], nested_field)
    else:
        value = _get_key(record, path)

    return None if _is_empty(value) else value

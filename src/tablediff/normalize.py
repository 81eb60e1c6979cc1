"""
Value normalization and row key helpers.

All comparisons in both matching modes go through ``normalize`` so the
case, whitespace and empty-vs-null policies apply uniformly.
"""

from collections.abc import Iterable

# Shared normalized form for None, "", whitespace-only and literal "null"
# when empty-vs-null differences are ignored. Not producible by the other
# branches because it contains a NUL character.
NULL_SENTINEL = "\x00null\x00"

KEY_SEPARATOR = "|"


def normalize(
    value: str | None,
    case_sensitive: bool,
    ignore_whitespace: bool,
    ignore_empty_vs_null: bool = False,
) -> str:
    """
    Normalize one cell value for comparison.

    Args:
        value: Raw cell value, ``None`` for null
        case_sensitive: Keep case when True, lower-case otherwise
        ignore_whitespace: Strip leading and trailing whitespace
        ignore_empty_vs_null: Fold null, empty, blank and literal "null" together

    Returns:
        Normalized string
    """
    if value is None:
        value = ""

    if ignore_empty_vs_null:
        stripped = value.strip()
        if not stripped or stripped.lower() == "null":
            return NULL_SENTINEL

    if ignore_whitespace:
        value = value.strip()
    if not case_sensitive:
        value = value.lower()
    return value


def row_fingerprint(
    values: Iterable[str | None],
    case_sensitive: bool,
    ignore_whitespace: bool,
    ignore_empty_vs_null: bool = False,
) -> tuple[str, ...]:
    """Normalized values of a row as a hashable tuple, one entry per column."""
    return tuple(
        normalize(value, case_sensitive, ignore_whitespace, ignore_empty_vs_null)
        for value in values
    )


def composite_key(values: Iterable[str | None]) -> tuple[str, ...]:
    """Raw key-column values as a hashable tuple; null becomes an empty string."""
    return tuple("" if value is None else value for value in values)


def key_label(key: tuple[str, ...]) -> str:
    return KEY_SEPARATOR.join(key)


__all__ = [
    "NULL_SENTINEL",
    "normalize",
    "row_fingerprint",
    "composite_key",
    "key_label",
]

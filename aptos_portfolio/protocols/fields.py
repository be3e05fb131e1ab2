"""Field access helpers shared by every adapter: pure functions, no I/O.

Upstream responses are untyped JSON whose shape drifts between deployments.
Adapters read every leaf through these helpers so a missing, null or
malformed field becomes a default instead of an exception or a NaN.
"""
from __future__ import annotations

import logging
import math
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def dig(obj: Any, *path: str | int, default: Any = None) -> Any:
    """Walk nested dicts/lists, returning ``default`` on any missing step.

    Examples:
        dig({"a": {"b": [1, 2]}}, "a", "b", 1) → 2
        dig({"a": None}, "a", "b", default=0)  → 0
    """
    current = obj
    for key in path:
        if isinstance(current, dict):
            current = current.get(key)
        elif isinstance(current, list) and isinstance(key, int):
            current = current[key] if -len(current) <= key < len(current) else None
        else:
            return default
        if current is None:
            return default
    return current


def dig_list(obj: Any, *path: str | int) -> list[Any]:
    """Like :func:`dig` but always returns a list."""
    value = dig(obj, *path)
    return value if isinstance(value, list) else []


def dig_dict(obj: Any, *path: str | int) -> dict[str, Any]:
    """Like :func:`dig` but always returns a dict."""
    value = dig(obj, *path)
    return value if isinstance(value, dict) else {}


def to_float(value: Any, default: float = 0.0) -> float:
    """Numeric field with fallback. Never returns NaN or infinity."""
    if value is None or value == "" or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def to_raw_amount(value: Any) -> str:
    """Integer smallest-unit amount as a decimal string; ``"0"`` on garbage.

    Fractional parts are truncated, signs are kept.
    """
    if value is None or value == "" or isinstance(value, bool):
        return "0"
    try:
        return str(int(Decimal(str(value))))
    except (InvalidOperation, ValueError, OverflowError):
        return "0"


def human_to_raw(amount: Any, decimals: int) -> str:
    """Convert a human-unit amount (``1.5``) to a raw integer string."""
    try:
        scaled = Decimal(str(amount)) * (Decimal(10) ** decimals)
        return str(int(scaled))
    except (InvalidOperation, ValueError, OverflowError):
        return "0"


def scale_amount(raw: str | int, decimals: int) -> float:
    """``raw / 10**decimals`` as a float; 0.0 when ``raw`` is not an integer."""
    try:
        return int(raw) / (10**decimals)
    except (TypeError, ValueError):
        return 0.0


def each_item(
    items: Iterable[Any],
    parse: Callable[[Any], Iterable[T]],
    protocol_key: str,
) -> list[T]:
    """Apply ``parse`` to each item, skipping items that raise.

    ``parse`` returns zero or more results per item. One malformed item never
    aborts the rest of the list.
    """
    results: list[T] = []
    for index, item in enumerate(items):
        try:
            results.extend(parse(item))
        except Exception as e:
            logger.warning(
                "Skipping malformed %s item #%d: %s", protocol_key, index, e
            )
    return results

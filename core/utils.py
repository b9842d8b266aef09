import logging
import random
import string
import time
from datetime import datetime, timezone
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_id(prefix: str) -> str:
    """Create a record id of the form ``<type>_<timestamp>_<random>``.

    The timestamp is milliseconds since the epoch and the random part is
    nine base-36 characters.
    """
    suffix = ''.join(random.choice(_ID_ALPHABET) for _ in range(9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def contains_either(a: Optional[str], b: Optional[str]) -> bool:
    """Case-insensitive, bidirectional substring containment."""
    a_norm = (a or '').lower()
    b_norm = (b or '').lower()
    return a_norm in b_norm or b_norm in a_norm


def any_contains_either(needle: str, haystack: Iterable[str]) -> bool:
    return any(contains_either(needle, item) for item in haystack)


def merge_unique(existing: Optional[List[str]], additions: Iterable[str]) -> List[str]:
    """Append items not already present, preserving order."""
    merged = list(existing or [])
    for item in additions:
        if item not in merged:
            merged.append(item)
    return merged


def clamp(value: float, low: float, high: float) -> float:
    if value != value:  # NaN
        logger.error(f"NaN score clamped to {low}")
        return low
    return max(low, min(high, value))

import re
import time
from typing import Any, Callable, Optional


_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
_LEADING_INTEGER_PATTERN = re.compile(r"^\s*([+-]?\d+)")


class IdGenerator:
    """Millisecond timestamp ids that never repeat.

    Two creations inside the same clock tick would share a timestamp, so each
    id is bumped to at least one past the previous one. Not thread-safe on its
    own; callers hold their own lock.
    """
    
    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.time
        self._last_id = 0
    
    @property
    def last_id(self) -> int:
        return self._last_id
    
    def next_id(self) -> int:
        """Return a fresh id, strictly greater than every id issued before."""
        now_ms = int(self._clock() * 1000)
        self._last_id = max(now_ms, self._last_id + 1)
        return self._last_id


def canonical_id(value: Any) -> str:
    """Map an identifier to the string form used for every comparison.
    
    ``7``, ``7.0`` and ``"7"`` all become ``"7"``.
    """
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, str):
        stripped = value.strip()
        if _INTEGER_PATTERN.match(stripped):
            return str(int(stripped))
        return stripped
    return str(value)


def parse_path_id(raw: str) -> Optional[int]:
    """Parse a URL path id with JavaScript ``parseInt`` semantics.
    
    Leading whitespace and trailing garbage are tolerated (``"12abc"`` -> 12);
    returns None when no leading integer is present.
    """
    match = _LEADING_INTEGER_PATTERN.match(raw or "")
    if not match:
        return None
    return int(match.group(1))

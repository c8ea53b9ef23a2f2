"""Size strings in the ``8M`` / ``512K`` / ``1.5M`` format."""

import re

_UNITS = "BKM"
_SIZE = re.compile(r"^(\d+(?:\.\d+)?|\.\d+)([BKM])$", re.IGNORECASE)


def parse_size(text: str | None) -> int | None:
    """Convert a size string to bytes, or None when empty or invalid."""
    if not text:
        return None
    match = _SIZE.match(text.strip())
    if not match:
        return None
    amount, unit = match.groups()
    return round(float(amount) * 1024 ** _UNITS.index(unit.upper()))

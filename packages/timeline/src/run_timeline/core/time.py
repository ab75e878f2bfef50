import math
from datetime import datetime, timezone


def parse_timestamp_ms(value: object) -> float | None:
    """
    Normalize an event timestamp to epoch milliseconds.

    Accepts numbers and numeric strings (already in ms) and ISO-8601 strings.
    Anything else, including NaN and booleans, gives None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        out = float(value)
        return out if math.isfinite(out) else None

    if not isinstance(value, str):
        return None

    s = value.strip()
    if not s:
        return None

    try:
        out = float(s)
    except ValueError:
        pass
    else:
        return out if math.isfinite(out) else None

    try:
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp() * 1000.0


def ms_to_iso(ms: float | None) -> str | None:
    if ms is None:
        return None
    dt = datetime.fromtimestamp(ms / 1000.0, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_duration_ms(ms: float | None) -> str:
    """Return a short human-readable duration string."""
    if ms is None:
        return "-"
    if ms < 1000:
        return f"{int(ms)} ms"
    return f"{ms / 1000:.2f} s"

import math
from typing import Any


# ---------- Form coercion ----------
def safe_number(value: Any, fallback: Any) -> Any:
    # Falsy inputs (None, "", 0, False) and uploaded objects keep the fallback.
    if not value or isinstance(value, (bytes, bytearray, dict, list, tuple, set)):
        return fallback
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return fallback
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return fallback
    return parsed if math.isfinite(parsed) else fallback


def to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    return value in ("true", "1")


def get_extension(name: str) -> str:
    parts = name.split(".")
    return parts[-1].lower() if len(parts) > 1 else ""


# ---------- Display ----------
SIZE_UNITS = ["B", "KB", "MB", "GB"]


def format_bytes(size: int) -> str:
    if size <= 0:
        return "0 B"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.1f} {SIZE_UNITS[unit]}"


def format_percent(value: float) -> str:
    return f"{int(math.floor(value + 0.5))}%"

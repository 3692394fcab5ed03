from typing import Optional


def to_int(v) -> Optional[int]:
    try:
        if v is None or v == "" or str(v).lower() == "null":
            return None
        return int(float(v))
    except (TypeError, ValueError):
        return None


def blank_to_none(v):
    """Map a missing or empty value to None; anything else is returned as is."""

    return None if v is None or v == "" else v


def mebibytes(value: float) -> int:
    return int(value * 1024 * 1024)

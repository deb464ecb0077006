from typing import Any


def clamp_limit(limit: Any, default: int, maximum: int) -> int:
    """Coerce a requested result count into ``1..maximum``."""
    if limit is None or isinstance(limit, bool):
        return default

    try:
        limit = int(limit)
    except (TypeError, ValueError):
        return default

    return max(1, min(limit, maximum))


def not_found(path: str) -> str:
    return f"Topic not found: {path}"

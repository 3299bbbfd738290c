"""Query-string helpers shared by the API views."""

from common.exceptions import ValidationFailed


def int_param(params, name: str, default: int, minimum: int = 0) -> int:
    raw = params.get(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationFailed(f"{name} must be an integer")
    if value < minimum:
        raise ValidationFailed(f"{name} must be >= {minimum}")
    return value

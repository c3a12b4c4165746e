from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict


def to_camel(value: str) -> str:
    """Convert snake_case field names to lowerCamelCase for API payloads."""
    if "_" not in value:
        return value
    head, *tail = value.split("_")
    return head + "".join(word.capitalize() for word in tail if word)


class CamelModel(BaseModel):
    """Request/response struct validated at the HTTP boundary."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class FrozenCamelModel(BaseModel):
    """Immutable value type shared across engine components; rejects NaN/Infinity."""

    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        frozen=True,
        allow_inf_nan=False,
    )


def parse_epoch(value: object) -> object:
    """Before-validator turning epoch seconds into an aware UTC datetime; other input passes through."""
    if isinstance(value, bool):
        raise ValueError("timestamp must be a datetime or epoch seconds")
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise ValueError("timestamp out of range") from None
    return value

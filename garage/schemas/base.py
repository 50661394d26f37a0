"""
Shared schema configuration.
"""
from datetime import datetime, timezone
from typing import Annotated, Literal
from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# GST slabs accepted on items, bills and the garage profile
GstPercent = Literal[0, 5, 12, 18, 28]


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class ORMModel(CamelModel):
    """Base schema for responses read from ORM objects."""

    model_config = ConfigDict(from_attributes=True)


def blank_to_none(value):
    """Treat empty form fields as missing."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def as_utc(value: datetime) -> datetime:
    """Normalise to an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Datetimes accepted from clients are stored in UTC
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]

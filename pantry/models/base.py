"""
Shared pydantic base for Pantry models.

Python attributes are snake_case; the JSON boundary is camelCase.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_number(value: float) -> str:
    """Render a number without a trailing .0 for whole values."""
    value = float(value)
    return str(int(value)) if value.is_integer() else str(value)


class CamelModel(BaseModel):
    """Base model accepting snake_case or camelCase input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
    )

    def to_api(self) -> dict:
        """Serialize for the JSON boundary."""
        return self.model_dump(mode="json", by_alias=True)

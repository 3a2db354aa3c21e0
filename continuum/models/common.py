"""Shared schema base and helpers."""

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base schema using the camelCase wire format.

    Fields are declared in snake_case; JSON in and out (API bodies and the
    documents stored in Redis) uses camelCase aliases. Both spellings are
    accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_document(self) -> str:
        """Serialize for storage."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


class SuccessResponse(ApiModel):
    """Plain acknowledgement body."""

    success: bool = True
    message: str | None = None


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(UTC)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def new_id(prefix: str | None = None) -> str:
    """Generate an entity id, optionally prefixed (``client-<hex>``)."""
    value = uuid.uuid4().hex
    return f"{prefix}-{value}" if prefix else value

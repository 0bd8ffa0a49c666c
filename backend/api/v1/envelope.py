"""The ``{success, message, data}`` wrapper every response is sent in."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Response schema serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: str = "OK"
    data: T | None = None


def ok(data: Any = None, message: str = "OK") -> Envelope[Any]:
    return Envelope(success=True, message=message, data=data)


def failure_body(message: str, data: Any = None) -> dict[str, Any]:
    return {"success": False, "message": message, "data": data}

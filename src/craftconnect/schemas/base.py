"""Common base for schema-normalized result records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Record(BaseModel):
    """Immutable record serialized with camelCase keys."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ResultRecord(Record):
    """Top-level analysis record with a provenance marker."""

    fallback: bool = False


R = TypeVar("R", bound=ResultRecord)


@dataclass(frozen=True)
class ResultSchema(Generic[R]):
    """Bundles the normalizer and fallback generator for one use case."""

    name: str
    normalize: Callable[[Any], R]
    fallback: Callable[[str], R]

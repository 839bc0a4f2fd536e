"""Record base shared by every persisted entity."""
from __future__ import annotations

import uuid
from typing import Any, Iterable, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from league.errors import ValidationFailure

R = TypeVar("R", bound="Record")


def new_id(prefix: str = "") -> str:
    """Short random id, optionally prefixed (e.g. "p_" for players)."""
    return f"{prefix}{uuid.uuid4().hex[:12]}"


def format_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(x) for x in err.get("loc", ())) or "value"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


class Record(BaseModel):
    """Pydantic base for stored records. Persisted JSON uses camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    def dump(self) -> dict[str, Any]:
        """JSON-ready dict in the persisted (camelCase) layout."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def build(cls: Type[R], **fields: Any) -> R:
        """Construct a record, converting pydantic errors to ValidationFailure."""
        try:
            return cls(**fields)
        except ValidationError as e:
            raise ValidationFailure(f"Invalid {cls.__name__.lower()}: {format_validation_error(e)}") from e

    def updated(self: R, **changes: Any) -> R:
        """Copy with changes applied and re-validated."""
        data = self.model_dump()
        data.update(changes)
        return type(self).build(**data)


def load_records(model: Type[R], rows: Iterable[dict]) -> list[R]:
    """Validate raw store rows; rows that no longer fit the model are skipped."""
    records = []
    for row in rows:
        try:
            records.append(model.model_validate(row))
        except ValidationError:
            continue
    return records


def dump_records(records: Iterable[Record]) -> list[dict[str, Any]]:
    return [r.dump() for r in records]

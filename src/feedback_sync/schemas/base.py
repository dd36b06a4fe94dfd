"""Read-model base for schemas built from ORM rows."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict


class SchemaBase(BaseModel):
    """Pydantic model readable from SQLAlchemy attributes, with strings stripped."""

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
    )

    @classmethod
    def from_orm(cls, obj: Any) -> Self:
        """Validate a SQLAlchemy row (or any attribute bag) into this schema."""
        return cls.model_validate(obj)

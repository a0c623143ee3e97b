from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from sparkbooks.errors import ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def parse_input(schema: type[SchemaT], data: dict[str, Any] | BaseModel) -> SchemaT:
    """Validate caller data against ``schema`` or raise ``ValidationError``."""
    if isinstance(data, schema):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc


def patch_fields(model: BaseModel, nullable: tuple[str, ...] = ()) -> dict[str, Any]:
    """Fields the caller actually set, minus ``None`` for non-nullable columns."""
    return {
        name: value
        for name, value in model.model_dump(exclude_unset=True).items()
        if value is not None or name in nullable
    }

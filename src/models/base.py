import datetime as dt
from typing import Annotated, Any, Dict, Optional, Type, TypeVar
from pydantic import BaseModel, Field, ConfigDict, BeforeValidator, field_serializer
from pydantic import ValidationError as PydanticValidationError

from src.errors import ValidationError

# Standardizes MongoDB ObjectIds to strings
PyObjectId = Annotated[str, BeforeValidator(str)]

M = TypeVar("M", bound=BaseModel)


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class MongoBaseModel(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra='forbid'
    )

    id: Optional[PyObjectId] = Field(None, alias="_id")
    created_at: dt.datetime = Field(default_factory=utc_now)
    updated_at: dt.datetime = Field(default_factory=utc_now)

    @field_serializer("created_at", "updated_at", when_used="json")
    def serialize_dt(self, value: dt.datetime):
        return value.isoformat()


def validate_input(model_class: Type[M], data: Dict[str, Any]) -> M:
    """
    Build a model from caller input, reporting failures as domain errors.

    Runs before any repository call so invalid input never reaches storage.
    """
    try:
        return model_class.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(f"{model_class.__name__}: {first['msg']}", field=field) from e


def changed_fields(current: BaseModel, validated: BaseModel, requested: Dict[str, Any]) -> Dict[str, Any]:
    """Validated values for the requested keys that actually differ."""
    return {
        key: getattr(validated, key)
        for key in requested
        if key in type(validated).model_fields and getattr(validated, key) != getattr(current, key)
    }


def merged_input(current: BaseModel, data: Dict[str, Any]) -> Dict[str, Any]:
    base = current.model_dump(exclude=set(type(current).model_computed_fields))
    base.update(data)
    return base

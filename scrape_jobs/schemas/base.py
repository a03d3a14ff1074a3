from functools import lru_cache
from typing import Any, FrozenSet, Type, get_args

from pydantic import BaseModel, model_validator


def _accepts_none(annotation: Any) -> bool:
    if annotation is Any or annotation is None:
        return True
    return type(None) in get_args(annotation)


@lru_cache(maxsize=None)
def non_nullable_keys(model: Type[BaseModel]) -> FrozenSet[str]:
    """Field names and aliases of ``model`` whose annotation does not admit ``None``."""
    keys = set()
    for name, field in model.model_fields.items():
        if _accepts_none(field.annotation):
            continue
        keys.add(name)
        if field.alias:
            keys.add(field.alias)
    return frozenset(keys)


class ZeroValueModel(BaseModel):
    """Base for provider payload models: a JSON ``null`` in a non-optional field reads as the field default."""

    @model_validator(mode="before")
    @classmethod
    def _null_as_default(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        skip = non_nullable_keys(cls)
        return {key: value for key, value in data.items() if value is not None or key not in skip}

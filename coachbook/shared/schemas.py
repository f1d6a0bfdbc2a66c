"""Base schema for the public JSON contract."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Schema serialized with camelCase keys and accepting either spelling on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

# krixflow/models/base.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    """Request body accepting both snake_case and the web client's camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

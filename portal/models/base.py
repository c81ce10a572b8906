"""Shared pydantic configuration for client-side records."""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ClientModel(BaseModel):
    """Record in client shape: snake_case attributes, camelCase wire names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_client(self, **kwargs) -> dict:
        return self.model_dump(by_alias=True, **kwargs)

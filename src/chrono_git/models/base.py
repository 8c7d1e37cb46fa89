"""Shared pydantic base for snapshot-facing models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model whose JSON form uses camelCase keys (``commitHash``, ``stagingArea``)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        """Dump to a JSON-compatible dictionary using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)

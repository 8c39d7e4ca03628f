"""Shared pydantic base for wire models

The frontend speaks camelCase JSON (htmlDocument, contactInfo, ...); Python
code uses snake_case attributes. Both spellings are accepted on input.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model serialised with camelCase aliases"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """Dump to the camelCase JSON-compatible dict sent to clients"""
        return self.model_dump(mode="json", by_alias=True)


class FrozenWireModel(WireModel):
    """Wire model that cannot be mutated after construction"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

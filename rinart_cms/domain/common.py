from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from ..services.content import ensure_facts, ensure_string_list, normalise_nullable

# Request field types that accept the loosely typed values the admin forms send.
NullableText = Annotated[str | None, BeforeValidator(normalise_nullable)]
StringList = Annotated[list[str], BeforeValidator(ensure_string_list)]
FactList = Annotated[list[dict[str, str]], BeforeValidator(ensure_facts)]


class CamelModel(BaseModel):
    """Base model serialised with the camelCase keys the admin panel uses."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def provided(self, *names: str) -> bool:
        """True when any of the given fields was present in the request body."""

        return any(name in self.model_fields_set for name in names)


class SuccessResponse(BaseModel):
    success: bool = True

"""
SSA Exchange - Shared Schema Types

Request and response bodies use camelCase keys. Amounts are Decimal in
Python and JSON numbers on the wire.
"""
from decimal import Decimal
from typing import Annotated
from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SuccessResponse(CamelModel):
    success: bool = True


class ErrorResponse(CamelModel):
    """Body of every failed request."""
    success: bool = False
    error: str

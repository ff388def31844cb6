"""
SSA Exchange - API Schemas
"""
from ssa_exchange.schemas.base import CamelModel, ErrorResponse, Money, SuccessResponse

__all__ = ["CamelModel", "ErrorResponse", "Money", "SuccessResponse"]

# Copyright (c) 2026 Heureum AI. All rights reserved.

"""Wire schemas that are not part of the chat models."""

from context_engine.schemas.errors import ErrorObject, ErrorResponse, ErrorType
from context_engine.schemas.health import HealthResponse

__all__ = [
    "ErrorObject",
    "ErrorResponse",
    "ErrorType",
    "HealthResponse",
]

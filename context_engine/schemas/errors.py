# Copyright (c) 2026 Heureum AI. All rights reserved.

"""Error payloads returned by the HTTP layer."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ErrorType(str, Enum):
    """Error category enumeration.

    Attributes:
        INVALID_REQUEST (str): Invalid or malformed request.
        MODEL_ERROR (str): A model backend failed to produce a completion.
        SERVER_ERROR (str): Internal server error.
    """

    INVALID_REQUEST = "invalid_request_error"
    MODEL_ERROR = "model_error"
    SERVER_ERROR = "server_error"


class ErrorObject(BaseModel):
    """Structured error response.

    Attributes:
        type (ErrorType): Error category identifier.
        code (Optional[str]): Detailed error code.
        message (str): Human-readable error explanation.
    """

    type: ErrorType = Field(description="Error category")
    code: Optional[str] = Field(default=None, description="Detailed error code")
    message: str = Field(description="Human-readable explanation")


class ErrorResponse(BaseModel):
    """Envelope for a single error."""

    error: ErrorObject

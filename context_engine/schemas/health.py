# Copyright (c) 2026 Heureum AI. All rights reserved.

"""Health check schema."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response model.

    Attributes:
        status (str): Current service health status.
        service (str): Service identifier.
    """

    status: str
    service: str

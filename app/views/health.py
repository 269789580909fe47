"""Schema for the liveness probe."""

from typing import Literal

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: Literal["OK", "ERROR"]
    timestamp: str
    service: str
    version: str

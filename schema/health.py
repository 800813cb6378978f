"""Contains the schema definition of the health check response
"""

from datetime import datetime

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Describes the structure of the health check response."""

    status: str
    uptime: float  # Seconds since the process started
    timestamp: datetime
    message: str

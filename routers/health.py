""" Health check router.
"""

import time

import pytz

from datetime import datetime

from fastapi import APIRouter, status

from schema.health import HealthResponse
from utils.http_status import status_message


# Process start, for reporting uptime
STARTED_AT = time.monotonic()

router = APIRouter(
    prefix="/api/health",
    tags=["Health"],
)


@router.get("", status_code=status.HTTP_200_OK, response_model=HealthResponse)
async def health_check():
    """Report that the API is up."""
    return HealthResponse(
        status="OK",
        uptime=time.monotonic() - STARTED_AT,
        timestamp=datetime.now(pytz.utc),
        message=status_message(status.HTTP_200_OK),
    )

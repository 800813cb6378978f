"""Logfire set-up for the application."""

import logfire

from fastapi import FastAPI

from utils.config import Settings


SERVICE_NAME = "backend-template-api"


def configure_logging(settings: Settings) -> None:
    """Configure logfire. Records are only exported when a write token is set.

    Args:
        settings (Settings): Application settings.
    """
    logfire.configure(
        token=settings.logfire_token,
        service_name=SERVICE_NAME,
        send_to_logfire="if-token-present",
    )


def instrument_libraries(app: FastAPI, settings: Settings) -> None:
    """Instrument pymongo and the FastAPI app when `LOGFIRE_INSTRUMENT` is enabled.

    Args:
        app (FastAPI): The application.
        settings (Settings): Application settings.
    """
    if not settings.logfire_instrument:
        return

    logfire.instrument_pymongo()
    logfire.instrument_fastapi(app)
    logfire.info("FastAPI application instrumented with logfire")

"""Error taxonomy surfaced by the HTTP layer.

Each error carries the status code it maps to and a short public message.
The message is what callers see; internal detail only goes to the logs.
"""

from __future__ import annotations


class WeatherApiError(Exception):
    """Base class for failures that terminate a request."""
    status_code: int = 500
    message: str = "internal error"

    def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class BadRequest(WeatherApiError):
    """Missing or malformed caller input."""
    status_code = 400
    message = "bad request"


class UpstreamError(WeatherApiError):
    """The forecast provider answered with a non-success status."""
    message = "weather provider error"

    def __init__(self, status_code: int, message: str | None = None) -> None:
        super().__init__(message, status_code=status_code)


class BadGateway(WeatherApiError):
    """The forecast provider answered, but not with the expected hourly arrays."""
    status_code = 502
    message = "unexpected weather data format"


class InternalError(WeatherApiError):
    """Anything else; details are logged, never returned."""
    status_code = 500
    message = "internal error"

"""
Error taxonomy for the insights gateways.

- MetricsUnavailableError: a warehouse query failed (network, auth, bad SQL).
  Raised by the Metrics Gateway; the original exception is chained.
- MalformedDataError: a stored or returned payload could not be mapped
  (undecodable factors, scores outside [0, 1], empty model envelope).

Hosted-model call failures are not wrapped: the model client's own
exception reaches the caller unchanged.
"""

from typing import Optional


class InsightsServiceError(Exception):
    """Base class for errors raised by the insights gateways."""


class MetricsUnavailableError(InsightsServiceError):
    """Raised when any warehouse query behind the metrics snapshot fails."""

    def __init__(self, message: str, query_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.query_name = query_name


class MalformedDataError(InsightsServiceError, ValueError):
    """Raised when warehouse or model data cannot be mapped to a prediction."""

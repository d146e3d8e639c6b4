# backend/lib/energy_core/errors.py
"""
Exception hierarchy shared by the pipeline, the batch driver and the handlers.

Each error carries the HTTP status a handler should answer with, so the
handlers can map any domain failure to a response in one place.
"""
from typing import Optional


class EnergyMonitorError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ClientInputError(EnergyMonitorError):
    """Malformed body, missing or invalid fields. Raised before any side effect."""
    status_code = 400


class MethodNotAllowedError(ClientInputError):
    """Wrong HTTP verb. Propagates out of the handler instead of becoming a response."""


class AuthorizationError(EnergyMonitorError):
    status_code = 401


class DependencyError(EnergyMonitorError):
    """A managed backend service call failed on a step that must succeed."""
    status_code = 500


class PersistenceError(DependencyError):
    pass


class TimeSeriesWriteError(DependencyError):
    pass


class BlobRetrievalError(DependencyError):
    pass


class BatchProcessingError(DependencyError):
    pass


class IdentityProviderError(EnergyMonitorError):
    """Cognito rejected the call; status and message come from the provider."""

"""Error taxonomy for restart orchestration."""

from __future__ import annotations


class CloudFoundryError(RuntimeError):
    """Base class for controller and log stream failures."""


class NotFoundError(CloudFoundryError):
    """Raised when an organization, space or application does not exist."""


class TransientError(CloudFoundryError):
    """Raised for network failures and server-side errors worth retrying."""


class StagingFailedError(CloudFoundryError):
    """Raised when the controller reports that staging the application failed."""


class StreamError(CloudFoundryError):
    """Raised or reported when the log stream misbehaves; never fatal to a restart."""


class LogStreamConnectionError(StreamError):
    """Raised when a log stream endpoint is unreachable or rejects authentication."""


class ControllerAPIError(CloudFoundryError):
    """Raised when the controller returns an error that is neither transient nor 404."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class InvalidTargetError(CloudFoundryError):
    """Raised when the organization, space or application name is blank."""

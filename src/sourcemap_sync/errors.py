"""Error types raised by the sync pipeline."""


class FatalError(Exception):
    """User-facing error that aborts the command."""


class MonitoringAPIError(Exception):
    """Recognized failure talking to the monitoring API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401

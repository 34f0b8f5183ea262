"""Custom exceptions for job-board source clients."""


class AdapterError(Exception):
    """Base exception for all source client errors.

    The search pipeline catches this to skip a failing source/keyword
    without aborting the whole search.
    """

    pass


class AdapterHTTPError(AdapterError):
    """HTTP request failed (4xx/5xx, or no response at all with status 0)."""

    def __init__(self, message: str, status_code: int, url: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class AdapterTimeoutError(AdapterError):
    """HTTP request did not complete within the configured timeout."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class AdapterResponseError(AdapterError):
    """Response was received but could not be parsed or had an unexpected shape."""

    pass


class AdapterConfigurationError(AdapterError):
    """Invalid client configuration (bad timeout, unsupported source, ...)."""

    pass

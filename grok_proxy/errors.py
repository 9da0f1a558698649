from typing import Optional


class ProxyError(Exception):
    """An error that is rendered to the caller as `{error, details?}`."""

    status_code: int = 500

    def __init__(self, error: str, details: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(error)
        self.error = error
        self.details = details
        if status_code is not None:
            self.status_code = status_code


class ClientValidationError(ProxyError):
    status_code = 400


class ConfigurationError(ProxyError):
    status_code = 500


class UpstreamRejection(ProxyError):
    """Non-2xx answer from a provider; the status code is mirrored."""

    def __init__(self, provider: str, status_code: int, reason: str, body: str):
        super().__init__(f"{provider} error: {reason}", details=body, status_code=status_code)

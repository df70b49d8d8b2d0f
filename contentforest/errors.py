"""Exception hierarchy for ContentForest."""

from typing import Any, Mapping, Optional


class ForestError(Exception):
    """Base exception for all ContentForest errors."""


class SourceConfigError(ForestError, ValueError):
    """Raised before traversal when the content source configuration is unusable."""


class StatusCodeError(ForestError):
    """Backend failure carrying an HTTP-like status code."""

    def __init__(self, message: str, status: int = 500):
        super().__init__(message)
        self.status = status


class NotFoundError(StatusCodeError):
    """Backend reported that the requested item does not exist."""

    def __init__(self, message: str = "not found"):
        super().__init__(message, 404)


class RateLimitError(StatusCodeError):
    """Backend asked us to slow down.

    ``retry_after`` is the provider's hint in seconds, if it sent one.
    """

    def __init__(self, message: str = "rate limit exceeded", retry_after: Optional[float] = None):
        super().__init__(message, 429)
        self.retry_after = retry_after


def _as_status(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def status_from_error(error: BaseException, default: int = 500) -> int:
    """Derive an HTTP-like status from an exception.

    Looks at ``status``, ``status_code``, a ``metadata`` mapping
    (``http_status_code`` / ``httpStatusCode``) and ``response.status_code``,
    in that order. The first integer found wins.

    Args:
        error: The exception raised by a backend
        default: Status to use when the exception carries none

    Returns:
        The derived status code
    """
    for attr in ("status", "status_code"):
        status = _as_status(getattr(error, attr, None))
        if status is not None:
            return status

    metadata = getattr(error, "metadata", None)
    if isinstance(metadata, Mapping):
        for key in ("http_status_code", "httpStatusCode"):
            status = _as_status(metadata.get(key))
            if status is not None:
                return status

    response = getattr(error, "response", None)
    if response is not None:
        status = _as_status(getattr(response, "status_code", None))
        if status is not None:
            return status

    return default

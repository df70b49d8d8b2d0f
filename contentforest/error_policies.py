"""
Error handling policies for ContentForest.

A policy decides what a failed folder listing turns into. The default
records it as a ``Failed`` entry so that the rest of the forest is still
listed; stricter policies stop the traversal.
"""

import logging
from abc import ABC, abstractmethod

from .core.items import Failed
from .errors import ForestError, status_from_error

logger = logging.getLogger(__name__)


class ErrorPolicy(ABC):
    """
    Base class for listing error policies.

    Subclasses implement different strategies for handling errors
    raised by a backend lister during traversal. Policies hold no state:
    the engine passes in how many failures the current run has recorded,
    so one policy can serve any number of runs.
    """

    @abstractmethod
    def handle(self, error: Exception, path: str, failed: int = 0) -> Failed:
        """
        Handle an error raised while listing the folder behind ``path``.

        Args:
            error: The exception raised by the lister
            path: Result path of the folder (``<folder>/*``)
            failed: Failures already recorded in this run

        Returns:
            The entry to record for ``path``, or raises to stop traversal.
        """
        pass


class RecordFailuresPolicy(ErrorPolicy):
    """
    Policy that records each failure as data and lets traversal continue.

    This is the default: callers get one entry per requested path and
    see failures as status-bearing entries instead of exceptions.
    """

    def handle(self, error: Exception, path: str, failed: int = 0) -> Failed:
        entry = Failed(path=path, status=status_from_error(error), error=str(error))
        logger.warning("listing %s failed (%d): %s", path, entry.status, error)
        return entry


class FailFastPolicy(ErrorPolicy):
    """
    Policy that immediately re-raises any error, stopping traversal.

    Useful when partial listings are worse than none.
    """

    def handle(self, error: Exception, path: str, failed: int = 0) -> Failed:
        raise error


class ThresholdPolicy(RecordFailuresPolicy):
    """
    Policy that tolerates failures up to a threshold, then stops.

    Some failing folders are expected in large trees; too many of them
    usually means the backend is down. The count is per run.
    """

    def __init__(self, max_errors: int = 10):
        """
        Initialize threshold policy.

        Args:
            max_errors: Maximum failures to record in one run before giving up
        """
        self.max_errors = max_errors

    def handle(self, error: Exception, path: str, failed: int = 0) -> Failed:
        if failed >= self.max_errors:
            raise ForestError(f"Error threshold exceeded ({self.max_errors} errors)") from error
        return super().handle(error, path, failed)

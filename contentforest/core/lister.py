"""Backend listing abstraction.

Defines the single capability the forest engine needs from a content
source: list one folder level. Pagination, rate limiting and name
mapping stay inside the backend implementation.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from ..errors import RateLimitError, status_from_error
from .items import RawItem

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FolderLister(ABC):
    """Abstract base class for backend folder listers.

    Listers bridge between the generic forest traversal and a specific
    remote hierarchy. One call resolves one folder level completely.
    """

    def __init__(self, retry_delay: float = 1.0, reserved_folder: str = ".helix"):
        """Initialize lister.

        Args:
            retry_delay: Seconds to sleep per unit of the provider's retry hint
            reserved_folder: Name of the metadata folder that is never listed
        """
        self.retry_delay = retry_delay
        self.reserved_folder = reserved_folder

    @abstractmethod
    async def list_folder(
        self,
        root_handle: Any,
        root_path: str,
        rel_path: str,
    ) -> Optional[List[RawItem]]:
        """List the children of one folder.

        Args:
            root_handle: Opaque handle of the node to start from
            root_path: Already-resolved absolute path of ``root_handle``
            rel_path: Path to descend relative to ``root_handle`` ('' lists its own children)

        Returns:
            The folder's items (``[]`` for an empty folder), or None if the
            folder does not exist

        Raises:
            Exception: Any other backend failure, ideally carrying a status
        """
        pass

    async def call_with_rate_limit(self, fetch: Callable[[], Awaitable[T]]) -> T:
        """Call ``fetch`` until it stops signalling a rate limit.

        A 429 (``RateLimitError`` or any error whose status derives to 429)
        sleeps for the provider's ``retry_after`` hint (default 1) scaled by
        ``retry_delay``, then retries the same call. Other errors propagate.
        """
        while True:
            try:
                return await fetch()
            except Exception as e:
                if status_from_error(e, default=0) != 429:
                    raise
                retry = _retry_hint(e) or 1
                logger.info("rate limit exceeded. sleeping for %ss", retry)
                await self.backoff(retry * self.retry_delay)

    async def backoff(self, seconds: float):
        """Sleep between rate-limited attempts."""
        await asyncio.sleep(seconds)

    async def close(self):
        """Release backend resources. Override if the lister holds any."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


def _retry_hint(error: BaseException) -> Optional[float]:
    if isinstance(error, RateLimitError):
        return error.retry_after
    rate_limit = getattr(error, "rate_limit", None)
    if isinstance(rate_limit, dict):
        return rate_limit.get("retry_after") or rate_limit.get("retryAfter")
    return getattr(rate_limit, "retry_after", None)

"""Configuration system for ContentForest.

This module defines how callers describe a content source (mountpoint),
how the traversal engine should behave, and the per-request context
that the list handlers receive.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .errors import SourceConfigError


class SourceType(Enum):
    """Kind of external content source a site is mounted on."""
    GOOGLE = "google"           # Shared-drive document store
    ONEDRIVE = "onedrive"       # Spreadsheet/file store
    MARKUP = "markup"           # Generic HTTP markup origin
    SOURCE = "source"           # S3-style object store (source bus)


@dataclass
class ContentSource:
    """A mountpoint: where a site's authoritative documents live."""

    type: SourceType
    url: str
    id: Optional[str] = None
    tenant_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ContentSource":
        """Build a content source from a mountpoint mapping.

        Args:
            data: Mapping with at least ``type`` and ``url``

        Returns:
            The parsed content source

        Raises:
            SourceConfigError: If the type is missing or unknown, or the url is missing
        """
        raw_type = data.get("type")
        if not raw_type:
            raise SourceConfigError("content source has no type")
        try:
            source_type = SourceType(raw_type)
        except ValueError:
            raise SourceConfigError(f"unknown content source type: {raw_type}") from None
        url = data.get("url")
        if not url:
            raise SourceConfigError(f"content source '{raw_type}' has no url")
        return cls(
            type=source_type,
            url=url,
            id=data.get("id"),
            tenant_id=data.get("tenantId", data.get("tenant_id")),
        )


@dataclass
class ForestConfig:
    """Configuration for a single traversal run."""

    max_concurrent: int = 1             # 1 = strictly sequential listing
    retry_delay: float = 1.0            # Seconds per unit of provider retry hint
    reserved_folder: str = ".helix"     # Never listed, never descended into
    page_size: int = 1000               # Requested page size for paginated backends

    def __post_init__(self):
        if self.max_concurrent < 1:
            raise SourceConfigError(
                f"max_concurrent must be at least 1, got {self.max_concurrent}"
            )
        if self.retry_delay < 0:
            raise SourceConfigError(
                f"retry_delay must not be negative, got {self.retry_delay}"
            )

    @classmethod
    def from_attributes(cls, attributes: Optional[Mapping[str, Any]]) -> "ForestConfig":
        """Read tunables from request attributes, keeping defaults for the rest."""
        attributes = attributes or {}
        kwargs = {}
        if attributes.get("retry_delay") is not None:
            kwargs["retry_delay"] = float(attributes["retry_delay"])
        if attributes.get("max_concurrent") is not None:
            kwargs["max_concurrent"] = int(attributes["max_concurrent"])
        return cls(**kwargs)


@dataclass
class RequestInfo:
    """Which site a list request is for."""

    org: str
    site: str
    route: str = "preview"


@dataclass
class AdminContext:
    """Per-request context handed to the list handlers.

    ``clients`` holds the already-authenticated backend clients keyed by
    name (``google``, ``onedrive``, ``source_bus``). Acquiring them is the
    caller's business.
    """

    source: ContentSource
    overlay: Optional[ContentSource] = None
    content_bus_id: Optional[str] = None
    config: ForestConfig = field(default_factory=ForestConfig)
    clients: Dict[str, Any] = field(default_factory=dict)

    def get_client(self, name: str) -> Any:
        """Return the backend client registered under ``name``.

        Raises:
            SourceConfigError: If no such client was provided
        """
        client = self.clients.get(name)
        if client is None:
            raise SourceConfigError(f"no '{name}' client configured for this request")
        return client

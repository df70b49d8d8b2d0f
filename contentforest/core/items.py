"""Data model for forest traversal.

A traversal consumes ``WorkItem`` units, receives ``RawItem`` listings
from a backend, and produces exactly one result entry per distinct path:
``Found``, ``NotFound`` or ``Failed``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union


@dataclass
class RawItem:
    """A backend-native item, already mapped into the destination namespace.

    ``path`` is the web path, ``resource_path`` the canonical resource path
    with its enforced extension. Folders have ``is_file`` False and are
    descended into by the engine.
    """

    name: str
    path: str
    resource_path: str
    is_file: bool = True
    sanitized_name: Optional[str] = None
    ext: str = ""
    size: Optional[int] = None
    mime_type: Optional[str] = None
    last_modified: Optional[int] = None   # epoch milliseconds
    fuzzy_distance: int = 0
    id: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class WorkItem:
    """A queued unit of folder-descent work.

    ``root_handle`` is opaque to the engine: the caller's root for prefix
    requests, or the discovered folder ``RawItem`` for subfolders.
    """

    root_handle: Any
    root_path: str
    rel_path: str

    @property
    def folder_path(self) -> str:
        """Absolute path of the folder this work item lists."""
        return f"{self.root_path}{self.rel_path}"

    @property
    def wildcard_path(self) -> str:
        """Result path used when the whole folder is missing or failed."""
        return f"{self.folder_path}/*"


@dataclass
class Found:
    """A requested or discovered resource that exists."""

    path: str
    resource_path: str
    item: RawItem


@dataclass
class NotFound:
    """A requested literal path or subtree that does not exist."""

    path: str
    status: int = 404

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "status": self.status}


@dataclass
class Failed:
    """A listing that raised; traversal carried on without it."""

    path: str
    status: int
    error: str

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "status": self.status, "error": self.error}


ResultEntry = Union[Found, NotFound, Failed]


@dataclass
class Progress:
    """Snapshot handed to the progress callback before each unit of work."""

    total: int              # entries recorded so far
    processed: int = 0      # backend listing calls made so far
    failed: int = 0         # Failed entries so far

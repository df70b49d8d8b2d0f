"""Result assembly.

Turns forest entries into the caller-facing resource descriptors. Found
entries become ``ResourceInfo`` records with a backend-specific
``SourceInfo``; not-found and failed entries pass through unchanged.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .items import Failed, Found, NotFound, RawItem, ResultEntry


@dataclass
class SourceInfo:
    """Where a resource comes from in its content source."""

    name: str
    type: str
    id: Optional[str] = None
    mime_type: Optional[str] = None
    last_modified: Optional[int] = None
    size: Optional[int] = None
    location: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'name': self.name,
            'id': self.id,
            'mimeType': self.mime_type,
            'lastModified': self.last_modified,
            'size': self.size,
            'location': self.location,
            'type': self.type,
        }
        return {key: value for key, value in data.items() if value is not None}


@dataclass
class ResourceInfo:
    """A resource that exists in the content source."""

    path: str
    resource_path: str
    source: SourceInfo

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'resourcePath': self.resource_path,
            'source': self.source.to_dict(),
        }


ResourceDescriptor = Union[ResourceInfo, NotFound, Failed]


def assemble(
    entries: Iterable[ResultEntry],
    to_source: Callable[[RawItem], SourceInfo],
) -> List[ResourceDescriptor]:
    """Convert forest entries into resource descriptors, sorted by path.

    Args:
        entries: Entries produced by ``Forest.generate``
        to_source: Backend-specific mapping of a raw item to its source info

    Returns:
        One descriptor per entry, ordered by path
    """
    result: List[ResourceDescriptor] = []
    for entry in entries:
        if isinstance(entry, Found):
            result.append(ResourceInfo(
                path=entry.path,
                resource_path=entry.resource_path,
                source=to_source(entry.item),
            ))
        else:
            result.append(entry)
    result.sort(key=lambda descriptor: descriptor.path)
    return result


def to_dicts(descriptors: Iterable[ResourceDescriptor]) -> List[Dict[str, Any]]:
    """JSON shapes of a descriptor list."""
    return [descriptor.to_dict() for descriptor in descriptors]

"""Source bus lister.

Lists documents stored in an S3-style object store under
``<org>/<site>/...``. A prefix listing returns every object below the
prefix at once, so a single call resolves a whole subtree and no folders
are reported.

The bucket is duck-typed and must provide one coroutine:

    list(prefix) -> list of {'path', 'lastModified', 'contentLength', 'contentType'}
        Every object below ``prefix``; ``path`` is relative to the prefix
        and starts with a slash.
"""

import logging
import posixpath
from functools import partial
from typing import Any, List, Optional

from ..core.assembler import SourceInfo
from ..core.items import RawItem
from ..core.lister import FolderLister
from ..errors import SourceConfigError, status_from_error
from ..paths import split_by_extension
from ._common import parse_timestamp

logger = logging.getLogger(__name__)

PROPS_FILE = '.props'


class SourceBusLister(FolderLister):
    """Lister for the object-store source bus."""

    def __init__(self, bucket: Any, org: str, site: str, retry_delay: float = 1.0,
                 reserved_folder: str = '.helix'):
        super().__init__(retry_delay=retry_delay, reserved_folder=reserved_folder)
        if not org or not site:
            raise SourceConfigError("source bus listing needs both org and site")
        self.bucket = bucket
        self.org = org
        self.site = site

    async def list_folder(self, root_handle: Any, root_path: str, rel_path: str) -> Optional[List[RawItem]]:
        key = f"{self.org}/{self.site}{rel_path}"
        logger.debug("listing objects below %s", key)
        try:
            listing = await self.call_with_rate_limit(partial(self.bucket.list, key))
        except Exception as e:
            if status_from_error(e, default=0) == 404:
                return None
            raise

        if not listing and rel_path:
            # object stores have no empty folders
            return None

        items = []
        for data in listing:
            item = self._to_item(f"{root_path}{rel_path}", data)
            if item is not None:
                items.append(item)
        logger.info("loaded %d objects below %s", len(items), key)
        return items

    def _to_item(self, parent_path: str, data: dict) -> Optional[RawItem]:
        rel = data.get('path') or ''
        name = posixpath.basename(rel)
        if not name or name == PROPS_FILE:
            return None
        if self.reserved_folder in rel.split('/'):
            return None

        path = f"{parent_path}{rel}"
        base_name, ext = split_by_extension(name)
        base_path = f"{path[:len(path) - len(name)]}{base_name}"
        item = RawItem(
            name=name,
            path=path,
            resource_path=path,
            ext=f".{ext}" if ext else "",
            size=data.get('contentLength'),
            mime_type=data.get('contentType'),
            last_modified=parse_timestamp(data.get('lastModified')),
            raw=data,
        )
        if name == 'index.html':
            item.path = f"{posixpath.dirname(path).rstrip('/')}/"
            item.resource_path = f"{base_path}.md"
            item.ext = '.md'
        elif ext == 'html':
            item.path = base_path
            item.resource_path = f"{base_path}.md"
            item.ext = '.md'
        return item


def to_source(item: RawItem) -> SourceInfo:
    """Source info of a source bus resource."""
    return SourceInfo(
        name=item.name,
        mime_type=item.mime_type,
        last_modified=item.last_modified,
        size=item.size,
        type='source',
    )

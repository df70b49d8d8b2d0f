"""OneDrive / SharePoint lister.

Lists a drive folder through an authenticated drive client. Word
documents become ``.md`` resources, Excel workbooks ``.json``.

The client is duck-typed and must provide one coroutine:

    list_children(root_item, rel_path, query) -> {'value': [...], '@odata.nextLink': ...}
        One page of children of ``root_item`` + ``rel_path``. Errors carry a
        ``status_code``; 429 errors may carry ``rate_limit.retry_after``.
"""

import logging
from datetime import datetime, timezone
from functools import partial
from typing import Any, List, Optional
from urllib.parse import parse_qs, urlsplit

from ..core.assembler import SourceInfo
from ..core.items import RawItem
from ..core.lister import FolderLister
from ..errors import status_from_error
from ..paths import ItemKind, dedupe_items, map_item, split_by_extension
from ._common import native_item, parse_timestamp

logger = logging.getLogger(__name__)

WORD_MIME = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'

# Word documents are never reported older than the last change of the docx -> md format
LAST_WORD2MD_FORMAT_DATE = int(datetime(2021, 6, 9, tzinfo=timezone.utc).timestamp() * 1000)

SELECT_FIELDS = 'name,parentReference,file,folder,id,size,webUrl,lastModifiedDateTime'


class OneDriveLister(FolderLister):
    """Lister for the OneDrive/SharePoint file store."""

    def __init__(
        self,
        drive: Any,
        retry_delay: float = 1.0,
        reserved_folder: str = '.helix',
        page_size: int = 999,
    ):
        super().__init__(retry_delay=retry_delay, reserved_folder=reserved_folder)
        self.drive = drive
        self.page_size = page_size

    async def list_folder(self, root_handle: Any, root_path: str, rel_path: str) -> Optional[List[RawItem]]:
        root_item = native_item(root_handle)
        parent_path = f"{root_path}{rel_path}"
        uri = _describe(root_item, rel_path)
        logger.debug("listing children for %s", uri)

        query = {
            '$top': self.page_size,
            '$select': SELECT_FIELDS,
        }
        children = []
        while True:
            try:
                result = await self.call_with_rate_limit(
                    partial(self.drive.list_children, root_item, rel_path, dict(query))
                )
            except Exception as e:
                status = status_from_error(e, default=0)
                logger.debug("listing children for %s failed: %s", uri, status)
                if status == 404:
                    return None
                raise
            children.extend(result.get('value') or [])
            skip_token = _skip_token(result.get('@odata.nextLink'))
            if not skip_token:
                break
            logger.debug("fetching more children with skiptoken %s", skip_token)
            query['$skiptoken'] = skip_token

        items = []
        for data in children:
            item = self._to_item(parent_path, data)
            if item is not None:
                items.append(item)
        items = dedupe_items(items)
        logger.info("loaded %d children from %s", len(items), uri)
        return items

    def _to_item(self, parent_path: str, data: dict) -> Optional[RawItem]:
        name = data.get('name') or ''
        if not name or name == self.reserved_folder:
            return None
        file_facet = data.get('file')
        if file_facet is None:
            kind = ItemKind.FOLDER
        else:
            ext = split_by_extension(name)[1]
            kind = {
                'docx': ItemKind.DOCUMENT,
                'xlsx': ItemKind.SPREADSHEET,
            }.get(ext, ItemKind.FILE)
        item = map_item(parent_path, name, kind)
        if item is None:
            return None
        item.id = data.get('id')
        item.mime_type = (file_facet or {}).get('mimeType')
        item.size = data.get('size') or 0
        item.last_modified = get_source_last_modified(data)
        item.raw = data
        return item


def get_source_last_modified(data: dict) -> Optional[int]:
    """Last-modified time of a drive item in epoch milliseconds, or None."""
    last_modified = parse_timestamp(data.get('lastModifiedDateTime'))
    if last_modified is None:
        return None
    if (data.get('file') or {}).get('mimeType') == WORD_MIME:
        return max(last_modified, LAST_WORD2MD_FORMAT_DATE)
    return last_modified


def _skip_token(next_link: Optional[str]) -> Optional[str]:
    if not next_link:
        return None
    values = parse_qs(urlsplit(next_link).query).get('$skiptoken')
    return values[0] if values else None


def _describe(root_item: Any, rel_path: str) -> str:
    if isinstance(root_item, dict):
        drive_id = (root_item.get('parentReference') or {}).get('driveId')
        return f"/drives/{drive_id}/items/{root_item.get('id')}:{rel_path}"
    return f"{root_item}:{rel_path}"


def to_source(item: RawItem) -> SourceInfo:
    """Source info of a OneDrive resource."""
    return SourceInfo(
        name=item.name,
        id=item.id,
        mime_type=item.mime_type or 'application/octet-stream',
        location=item.raw.get('webUrl'),
        last_modified=item.last_modified,
        size=item.size or 0,
        type='onedrive',
    )

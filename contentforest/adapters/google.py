"""Google Drive lister.

Lists a shared-drive folder through an authenticated drive client.
Google documents become ``.md`` resources, spreadsheets ``.json``;
other files keep their own extension.

The client is duck-typed and must provide two coroutines:

    get_items_from_path(root_id, rel_path, mime_type) -> list of {'id': ...}
        Resolves ``rel_path`` below ``root_id``; the first item is the
        deepest match, an empty list means the path does not exist.

    list_files(q, fields, page_size, page_token) -> {'files': [...], 'nextPageToken': ...}
        One page of the drive ``files.list`` call.
"""

import logging
from functools import partial
from typing import Any, List, Optional

from ..core.assembler import SourceInfo
from ..core.items import RawItem
from ..core.lister import FolderLister
from ..errors import status_from_error
from ..paths import ItemKind, dedupe_items, map_item
from ._common import handle_id, parse_timestamp

logger = logging.getLogger(__name__)

FOLDER_MIME = 'application/vnd.google-apps.folder'
DOCUMENT_MIME = 'application/vnd.google-apps.document'
SPREADSHEET_MIME = 'application/vnd.google-apps.spreadsheet'

LIST_FIELDS = 'nextPageToken, files(id, name, mimeType, modifiedTime, size)'

_KINDS = {
    FOLDER_MIME: ItemKind.FOLDER,
    DOCUMENT_MIME: ItemKind.DOCUMENT,
    SPREADSHEET_MIME: ItemKind.SPREADSHEET,
}


class GoogleDriveLister(FolderLister):
    """Lister for the shared-drive document store."""

    def __init__(
        self,
        client: Any,
        retry_delay: float = 1.0,
        reserved_folder: str = '.helix',
        page_size: int = 1000,
    ):
        """Initialize Google Drive lister.

        Args:
            client: Authenticated drive client (see module docstring)
            retry_delay: Seconds to sleep per unit of the provider's retry hint
            reserved_folder: Metadata folder that is never listed
            page_size: Files requested per page
        """
        super().__init__(retry_delay=retry_delay, reserved_folder=reserved_folder)
        self.client = client
        self.page_size = page_size

    async def list_folder(self, root_handle: Any, root_path: str, rel_path: str) -> Optional[List[RawItem]]:
        parent_path = f"{root_path}{rel_path}"
        root_id = handle_id(root_handle)
        logger.debug("listing children for %s:%s", root_id, parent_path)
        try:
            folder_id = root_id
            if rel_path:
                hierarchy = await self.call_with_rate_limit(
                    partial(self.client.get_items_from_path, root_id, rel_path, FOLDER_MIME)
                )
                if not hierarchy:
                    return None
                folder_id = hierarchy[0]['id']
            files = await self._list_all(folder_id)
        except Exception as e:
            if status_from_error(e, default=0) == 404:
                return None
            raise

        items = []
        for data in files:
            item = self._to_item(parent_path, data)
            if item is not None:
                items.append(item)
        items = dedupe_items(items)
        logger.info("loaded %d children from %s:%s", len(items), root_id, parent_path)
        return items

    async def _list_all(self, folder_id: str) -> List[dict]:
        files = []
        page_token = None
        while True:
            data = await self.call_with_rate_limit(partial(
                self.client.list_files,
                q=f"'{folder_id}' in parents and trashed=false",
                fields=LIST_FIELDS,
                page_size=self.page_size,
                page_token=page_token,
            ))
            page = data.get('files') or []
            files.extend(page)
            page_token = data.get('nextPageToken')
            logger.debug(
                "fetched %d items below %s. nextPageToken=%s",
                len(page), folder_id, '****' if page_token else None,
            )
            if not page_token:
                return files

    def _to_item(self, parent_path: str, data: dict) -> Optional[RawItem]:
        name = data.get('name') or ''
        if not name or name == self.reserved_folder:
            return None
        mime_type = data.get('mimeType')
        item = map_item(parent_path, name, _KINDS.get(mime_type, ItemKind.FILE))
        if item is None:
            return None
        item.id = data.get('id')
        item.mime_type = mime_type
        item.size = int(data['size']) if data.get('size') is not None else None
        item.last_modified = parse_timestamp(data.get('modifiedTime'))
        item.raw = data
        return item


def to_source(item: RawItem) -> SourceInfo:
    """Source info of a Google Drive resource."""
    return SourceInfo(
        name=item.name,
        id=item.id,
        mime_type=item.mime_type or 'application/octet-stream',
        last_modified=item.last_modified,
        size=item.size,
        type='gdrive',
    )

"""Test fixtures for ContentForest consumers.

In-memory stand-ins for the backend listers and clients, so that code
built on ContentForest can be tested without talking to a drive or a
bucket.
"""

from typing import Any, Dict, List, Optional, Union

from ..core.items import RawItem
from ..core.lister import FolderLister


def file_item(path: str, resource_path: Optional[str] = None, **kwargs) -> RawItem:
    """A file RawItem at ``path`` (resource path defaults to the path)."""
    name = kwargs.pop('name', path.rsplit('/', 1)[-1])
    return RawItem(name=name, path=path, resource_path=resource_path or path, **kwargs)


def folder_item(path: str, **kwargs) -> RawItem:
    """A folder RawItem at ``path``."""
    name = kwargs.pop('name', path.rsplit('/', 1)[-1])
    return RawItem(name=name, path=path, resource_path=path, is_file=False, **kwargs)


Listing = Union[List[RawItem], None, Exception]


class MemoryLister(FolderLister):
    """Lister backed by a mapping of folder path to listing.

    A listing is a list of RawItems, None for a missing folder, or an
    exception to raise. Unknown folders are missing.

    Example:
        lister = MemoryLister({
            '/docs': [file_item('/docs/a'), folder_item('/docs/sub')],
            '/docs/sub': [file_item('/docs/sub/b')],
            '/broken': RuntimeError('boom'),
        })
    """

    def __init__(self, tree: Dict[str, Listing]):
        super().__init__(retry_delay=0)
        self.tree = tree
        self.calls: List[str] = []

    async def list_folder(self, root_handle: Any, root_path: str, rel_path: str) -> Optional[List[RawItem]]:
        folder_path = f"{root_path}{rel_path}"
        self.calls.append(folder_path)
        listing = self.tree.get(folder_path)
        if isinstance(listing, Exception):
            raise listing
        if listing is None:
            return None
        return list(listing)


class FakeDriveClient:
    """Google drive client over an in-memory folder tree.

    ``folders`` maps folder id to its list of file records (``id``,
    ``name``, ``mimeType``, ...). Paths are resolved by folder name.
    ``page_size`` splits listings into pages to exercise pagination.
    """

    FOLDER_MIME = 'application/vnd.google-apps.folder'

    def __init__(self, folders: Dict[str, List[dict]], page_size: int = 1000):
        self.folders = folders
        self.page_size = page_size
        self.list_calls: List[dict] = []

    async def get_items_from_path(self, root_id: str, rel_path: str, mime_type: str) -> List[dict]:
        current = {'id': root_id}
        for segment in [s for s in rel_path.split('/') if s]:
            match = next(
                (f for f in self.folders.get(current['id'], [])
                 if f.get('name') == segment and f.get('mimeType') == self.FOLDER_MIME),
                None,
            )
            if match is None:
                return []
            current = match
        return [current]

    async def list_files(self, q: str, fields: str, page_size: int, page_token: Optional[str] = None) -> dict:
        self.list_calls.append({'q': q, 'page_token': page_token})
        folder_id = q.split("'")[1]
        files = self.folders.get(folder_id, [])
        start = int(page_token or 0)
        end = start + self.page_size
        data = {'files': files[start:end]}
        if end < len(files):
            data['nextPageToken'] = str(end)
        return data


class FakeBucket:
    """Object-store bucket over a mapping of key to object record."""

    def __init__(self, objects: Dict[str, dict]):
        self.objects = objects

    async def list(self, prefix: str) -> List[dict]:
        result = []
        for key in sorted(self.objects):
            if key.startswith(f"{prefix}/"):
                result.append({**self.objects[key], 'key': key, 'path': key[len(prefix):]})
        return result

"""Markup origin listing.

A markup origin cannot be enumerated, so its list is derived from the
requested literal paths alone: no requests are made to the origin.
Wildcard requests are ignored. ``lastModified`` is set to now so that
every listed resource is refreshed.
"""

import logging
import posixpath
import time
from typing import Iterable, List, Optional

from ..core.assembler import ResourceInfo, SourceInfo
from ..paths import sanitize_name, split_by_extension, to_resource_path

logger = logging.getLogger(__name__)

# extension -> content type of everything a markup origin may serve
DOCUMENT_TYPES = {
    '.md': 'text/markdown; charset=utf-8',
    '.json': 'application/json',
    '.pdf': 'application/pdf',
}

MEDIA_TYPES = {
    '.svg': 'application/xml',
    '.png': 'image/png',
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.gif': 'image/gif',
    '.mp4': 'video/mp4',
    '.ico': 'image/x-icon',
}

ALLOWED_MARKUP_TYPES = {**DOCUMENT_TYPES, **MEDIA_TYPES}


def list_markup(content_url: str, paths: Iterable[str], now: Optional[int] = None) -> List[ResourceInfo]:
    """Build resource descriptors for literal paths on a markup origin.

    Args:
        content_url: Base URL of the markup origin
        paths: Requested paths; empty and wildcard paths are skipped
        now: Timestamp (epoch ms) to report as last modified

    Returns:
        One descriptor per distinct resource path with an allowed type
    """
    if now is None:
        now = int(time.time() * 1000)
    content_url = content_url[:-1] if content_url.endswith('/') else content_url

    resources = {}
    for path in paths:
        if not path or path.endswith('*'):
            continue
        resource_path = to_resource_path(path)
        if not resource_path or resource_path in resources:
            continue

        item_name, ext = split_by_extension(posixpath.basename(resource_path))
        content_type = ALLOWED_MARKUP_TYPES.get(f".{ext}")
        if content_type is None:
            logger.debug("skipping %s: unsupported markup type .%s", path, ext)
            continue

        resources[resource_path] = ResourceInfo(
            path=path,
            resource_path=resource_path,
            source=SourceInfo(
                name=f"{sanitize_name(item_name)}.{ext}",
                mime_type=content_type,
                location=f"{content_url}{path}",
                last_modified=now,
                type='markup',
            ),
        )
    return list(resources.values())

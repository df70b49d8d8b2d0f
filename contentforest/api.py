"""High-level list API for ContentForest.

This module provides the functions admin handlers call to list the
resources of a site's content source. Each backend gets a ``list_*``
function; ``list_resources`` dispatches on the configured source type.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

from .adapters import google, onedrive, sourcebus
from .adapters.google import GoogleDriveLister
from .adapters.markup import list_markup
from .adapters.onedrive import OneDriveLister
from .adapters.sourcebus import SourceBusLister
from .config import AdminContext, RequestInfo, SourceType
from .core import Forest, ProgressCallback, ResourceDescriptor, assemble
from .errors import SourceConfigError

logger = logging.getLogger(__name__)

ListFunction = Callable[
    [AdminContext, RequestInfo, List[str], Optional[ProgressCallback]],
    Awaitable[List[ResourceDescriptor]],
]


async def list_google(
    context: AdminContext,
    info: RequestInfo,
    paths: Iterable[str],
    progress_cb: Optional[ProgressCallback] = None,
) -> List[ResourceDescriptor]:
    """List resources of a Google Drive mountpoint.

    Paths ending in ``/*`` are listed recursively.
    """
    source = context.source
    if not source.id:
        raise SourceConfigError("google content source has no root folder id")
    config = context.config
    lister = GoogleDriveLister(
        context.get_client('google'),
        retry_delay=config.retry_delay,
        reserved_folder=config.reserved_folder,
        page_size=config.page_size,
    )
    forest = Forest(lister, max_concurrent=config.max_concurrent)
    entries = await forest.generate(source, paths, progress_cb)
    return assemble(entries, google.to_source)


async def list_onedrive(
    context: AdminContext,
    info: RequestInfo,
    paths: Iterable[str],
    progress_cb: Optional[ProgressCallback] = None,
) -> List[ResourceDescriptor]:
    """List resources of a OneDrive/SharePoint mountpoint.

    The root drive item is resolved from the mountpoint's share link
    through the client's ``get_drive_item_from_share_link`` coroutine.
    """
    config = context.config
    drive = context.get_client('onedrive')
    logger.debug("resolving sharelink to %s", context.source.url)
    root_item = await drive.get_drive_item_from_share_link(context.source.url)

    lister = OneDriveLister(
        drive,
        retry_delay=config.retry_delay,
        reserved_folder=config.reserved_folder,
    )
    forest = Forest(lister, max_concurrent=config.max_concurrent)
    entries = await forest.generate(root_item, paths, progress_cb)
    return assemble(entries, onedrive.to_source)


async def list_source_bus(
    context: AdminContext,
    info: RequestInfo,
    paths: Iterable[str],
    progress_cb: Optional[ProgressCallback] = None,
) -> List[ResourceDescriptor]:
    """List resources stored in the source bus for ``info.org``/``info.site``."""
    config = context.config
    lister = SourceBusLister(
        context.get_client('source_bus'),
        info.org,
        info.site,
        retry_delay=config.retry_delay,
        reserved_folder=config.reserved_folder,
    )
    forest = Forest(lister, max_concurrent=config.max_concurrent)
    entries = await forest.generate(context.source, paths, progress_cb)
    return assemble(entries, sourcebus.to_source)


async def list_markup_source(
    context: AdminContext,
    info: RequestInfo,
    paths: Iterable[str],
    progress_cb: Optional[ProgressCallback] = None,
) -> List[ResourceDescriptor]:
    """List resources of a markup origin (or of the markup overlay).

    The overlay wins when present; otherwise the source itself must be a
    markup origin.
    """
    source, overlay = context.source, context.overlay
    if overlay is not None:
        content_url = overlay.url
    elif source.type == SourceType.MARKUP:
        content_url = source.url
    else:
        raise SourceConfigError(f"no markup origin configured for '{source.type.value}' source")
    resources = list_markup(content_url, paths)
    resources.sort(key=lambda resource: resource.path)
    return resources


@dataclass(frozen=True)
class ContentSourceHandler:
    """How to list one kind of content source."""
    name: str
    list: ListFunction


HANDLERS: Dict[SourceType, ContentSourceHandler] = {
    SourceType.GOOGLE: ContentSourceHandler('google', list_google),
    SourceType.ONEDRIVE: ContentSourceHandler('onedrive', list_onedrive),
    SourceType.MARKUP: ContentSourceHandler('markup', list_markup_source),
    SourceType.SOURCE: ContentSourceHandler('source', list_source_bus),
}


def get_content_source_handler(source_type: SourceType) -> ContentSourceHandler:
    """Return the handler for ``source_type``.

    Raises:
        SourceConfigError: If no handler is registered for it
    """
    handler = HANDLERS.get(source_type)
    if handler is None:
        raise SourceConfigError(f"no handler found for content source type: {source_type}")
    return handler


async def list_resources(
    context: AdminContext,
    info: RequestInfo,
    paths: Iterable[str],
    progress_cb: Optional[ProgressCallback] = None,
) -> List[ResourceDescriptor]:
    """List the resources behind ``paths`` in the site's content source.

    Args:
        context: Request context with mountpoint, config and backend clients
        info: Which org/site the request is for
        paths: Requested paths; a trailing ``/*`` lists the whole subtree
        progress_cb: Polled before each unit of work; returning False aborts

    Returns:
        Descriptors sorted by path: ``ResourceInfo`` for existing resources,
        ``NotFound``/``Failed`` markers otherwise. A run aborted through the
        progress callback returns an empty list.
    """
    handler = get_content_source_handler(context.source.type)
    paths = list(paths)
    logger.info("listing %d paths from %s source of %s/%s", len(paths), handler.name, info.org, info.site)
    return await handler.list(context, info, paths, progress_cb)

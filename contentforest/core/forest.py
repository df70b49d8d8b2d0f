"""Forest traversal engine.

Walks an externally hosted hierarchy through a ``FolderLister`` and
produces one flat, path-sorted list of result entries covering every
requested path. The same engine drives every backend.
"""

import asyncio
import inspect
import logging
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, Iterable, List, Optional, Union

from ..error_policies import ErrorPolicy, RecordFailuresPolicy
from ..paths import WILDCARD_SUFFIX, classify_paths, dedupe_items, parent_folder
from .items import Found, NotFound, Progress, RawItem, ResultEntry, WorkItem
from .lister import FolderLister

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Progress], Union[bool, Awaitable[bool]]]

# outcome of one listing call: items, None (folder missing) or the raised error
_Outcome = Union[List[RawItem], None, Exception]


class _Cancelled(Exception):
    """The progress callback vetoed continuation."""


class Forest:
    """Generic worklist-driven traversal over one backend.

    Create one instance per list request; it keeps nothing between
    ``generate()`` calls.

    Example:
        >>> forest = Forest(GoogleDriveLister(client))
        >>> entries = await forest.generate(root, ['/docs/*', '/blog/post1'])
    """

    def __init__(
        self,
        lister: FolderLister,
        max_concurrent: int = 1,
        error_policy: Optional[ErrorPolicy] = None,
    ):
        """Initialize the engine.

        Args:
            lister: Backend capability that lists one folder level
            max_concurrent: Folder listings allowed in flight at once (1 = sequential)
            error_policy: What failed listings become (defaults to RecordFailuresPolicy)
        """
        self.lister = lister
        self.max_concurrent = max(1, max_concurrent)
        self.error_policy = error_policy or RecordFailuresPolicy()

    async def generate(
        self,
        root_handle: Any,
        paths: Iterable[str],
        progress_cb: Optional[ProgressCallback] = None,
    ) -> List[ResultEntry]:
        """List every requested path below ``root_handle``.

        Paths ending in ``/*`` are listed recursively; all others are looked
        up literally. The progress callback is polled before every unit of
        work. It is coarse-grained: a listing call already in flight is
        never interrupted.

        Args:
            root_handle: Backend handle of the content source root
            paths: Requested paths
            progress_cb: Optional callback; returning False aborts the run

        Returns:
            Entries sorted by path, one per distinct path. An aborted run
            returns an empty list.
        """
        paths = list(paths)
        folder_work, file_paths = classify_paths(root_handle, paths)
        run = _ForestRun(self, progress_cb)
        try:
            await run.list_folders(deque(folder_work))
            await run.list_files(root_handle, file_paths)
        except _Cancelled:
            logger.warning("listing aborted by progress callback after %d entries", len(run.entries))
            return []

        for path in paths:
            if not path.endswith(WILDCARD_SUFFIX) and path not in run.entries:
                run.entries[path] = NotFound(path)

        result = sorted(run.entries.values(), key=lambda entry: entry.path)
        logger.info("generated %d entries from %d listing calls", len(result), run.processed)
        return result


class _ForestRun:
    """State of one ``generate()`` call: result map and folder cache."""

    def __init__(self, forest: Forest, progress_cb: Optional[ProgressCallback]):
        self.lister = forest.lister
        self.max_concurrent = forest.max_concurrent
        self.error_policy = forest.error_policy
        self.progress_cb = progress_cb
        self.entries: Dict[str, ResultEntry] = {}
        self.folders: Dict[str, List[RawItem]] = {}
        self.processed = 0
        self.failed = 0

    async def poll(self):
        """Ask the progress callback whether to continue."""
        if self.progress_cb is None:
            return
        result = self.progress_cb(Progress(
            total=len(self.entries),
            processed=self.processed,
            failed=self.failed,
        ))
        if inspect.isawaitable(result):
            result = await result
        if result is False:
            raise _Cancelled()

    async def list_folders(self, queue: Deque[WorkItem]):
        """Drain the folder queue, enqueuing subfolders as they are found."""
        while queue:
            batch = []
            while queue and len(batch) < self.max_concurrent:
                await self.poll()
                batch.append(queue.popleft())

            if len(batch) == 1:
                outcomes = [await self._list(batch[0])]
            else:
                outcomes = await asyncio.gather(*(self._list(work) for work in batch))

            # merge in dequeue order so upserts stay deterministic
            for work, outcome in zip(batch, outcomes):
                self._merge(work, outcome, queue)

    async def list_files(self, root_handle: Any, file_paths: List[str]):
        """Resolve literal paths, listing each parent folder at most once."""
        for path in file_paths:
            await self.poll()
            folder_path = parent_folder(path)
            items = self.folders.get(folder_path)
            if items is None:
                work = WorkItem(root_handle=root_handle, root_path="", rel_path=folder_path)
                outcome = await self._list(work)
                if isinstance(outcome, Exception):
                    self._record_failure(outcome, work.wildcard_path)
                    items = []
                elif outcome is None:
                    self.entries[work.wildcard_path] = NotFound(work.wildcard_path)
                    items = []
                else:
                    items = outcome
                self.folders[folder_path] = items

            match = next((item for item in items if item.path == path and item.is_file), None)
            if match is not None:
                self.entries[path] = Found(path, match.resource_path, match)
            else:
                self.entries[path] = NotFound(path)

    async def _list(self, work: WorkItem) -> _Outcome:
        logger.debug("listing %s", work.wildcard_path)
        self.processed += 1
        try:
            items = await self.lister.list_folder(work.root_handle, work.root_path, work.rel_path)
        except Exception as e:
            return e
        if items is None:
            return None
        return dedupe_items(items)

    def _merge(self, work: WorkItem, outcome: _Outcome, queue: Deque[WorkItem]):
        if isinstance(outcome, Exception):
            self._record_failure(outcome, work.wildcard_path)
            self.folders[work.folder_path] = []
            return
        if outcome is None:
            self.entries[work.wildcard_path] = NotFound(work.wildcard_path)
            self.folders[work.folder_path] = []
            return

        self.folders[work.folder_path] = outcome
        for item in outcome:
            if item.is_file:
                self.entries[item.path] = Found(item.path, item.resource_path, item)
            else:
                queue.append(WorkItem(root_handle=item, root_path=item.path, rel_path=""))

    def _record_failure(self, error: Exception, path: str):
        self.entries[path] = self.error_policy.handle(error, path, self.failed)
        self.failed += 1

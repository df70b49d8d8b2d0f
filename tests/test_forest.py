"""Tests for the forest traversal engine."""

import pytest

from contentforest import (
    FailFastPolicy,
    Failed,
    Forest,
    ForestError,
    Found,
    NotFound,
    Progress,
    StatusCodeError,
    ThresholdPolicy,
)
from contentforest.core.lister import FolderLister
from contentforest.testing import MemoryLister, file_item, folder_item


# Test fixtures

@pytest.fixture
def test_tree():
    """Folder listings keyed by folder path.

    Structure:
        /zoo
        /foo
        ├── file1
        ├── explicit
        └── sub
            └── file1
        /bar              (listing raises)
        /products
        ├── generic
        │   └── p1
        └── missing       (listing returns None)
    """
    return {
        '': [file_item('/zoo')],
        '/foo': [
            file_item('/foo/file1'),
            file_item('/foo/explicit'),
            folder_item('/foo/sub'),
        ],
        '/foo/sub': [file_item('/foo/sub/file1')],
        '/zoo': [file_item('/foo/sub/file1')],
        '/bar': RuntimeError('boom'),
        '/products': [
            folder_item('/products/generic'),
            folder_item('/products/missing'),
        ],
        '/products/generic': [file_item('/products/generic/p1')],
        '/products/missing': None,
    }


def summarize(entries):
    """Reduce entries to comparable tuples."""
    result = []
    for entry in entries:
        if isinstance(entry, Found):
            result.append(('found', entry.path))
        elif isinstance(entry, Failed):
            result.append(('failed', entry.path, entry.status, entry.error))
        else:
            result.append(('missing', entry.path, entry.status))
    return result


class TestGenerate:
    """Test the folder phase, literal phase and completeness pass."""

    @pytest.mark.asyncio
    async def test_generates_folder_and_item_list(self, test_tree):
        """Mixed wildcard and literal requests produce one sorted entry per path."""
        lister = MemoryLister(test_tree)
        forest = Forest(lister)

        entries = await forest.generate('root-id', [
            '/foo/*',
            '/bar/*',
            '/zoo',
            '/foo/explicit',
            '/foo/explicit-notfound',
            '/products/missing/folder',
            '/notexist/*',
        ])

        assert summarize(entries) == [
            ('failed', '/bar/*', 500, 'boom'),
            ('found', '/foo/explicit'),
            ('missing', '/foo/explicit-notfound', 404),
            ('found', '/foo/file1'),
            ('found', '/foo/sub/file1'),
            ('missing', '/notexist/*', 404),
            ('missing', '/products/missing/*', 404),
            ('missing', '/products/missing/folder', 404),
            ('found', '/zoo'),
        ]

    @pytest.mark.asyncio
    async def test_folder_queue_is_breadth_first(self, test_tree):
        """Subfolders are appended to the end of the same queue."""
        lister = MemoryLister(test_tree)
        await Forest(lister).generate('root-id', ['/foo/*', '/products/*', '/zoo'])

        assert lister.calls == [
            '/foo',
            '/products',
            '/foo/sub',
            '/products/generic',
            '/products/missing',
            '',
        ]

    @pytest.mark.asyncio
    async def test_root_wildcard_lists_everything(self, test_tree):
        """'/*' starts at the root handle itself."""
        lister = MemoryLister({
            '': [file_item('/index'), folder_item('/blog')],
            '/blog': [file_item('/blog/post1')],
        })
        entries = await Forest(lister).generate('root-id', ['/*'])

        assert [entry.path for entry in entries] == ['/blog/post1', '/index']
        assert lister.calls == ['', '/blog']

    @pytest.mark.asyncio
    async def test_subfolder_handle_is_the_folder_item(self):
        """Discovered folders are listed through their own item, not the root."""
        seen = []

        class RecordingLister(FolderLister):
            async def list_folder(self, root_handle, root_path, rel_path):
                seen.append((root_handle, root_path, rel_path))
                if rel_path == '/docs':
                    return [folder_item('/docs/sub', id='sub-id')]
                return []

        await Forest(RecordingLister()).generate('root-id', ['/docs/*'])

        assert seen[0] == ('root-id', '', '/docs')
        handle, root_path, rel_path = seen[1]
        assert handle.id == 'sub-id'
        assert (root_path, rel_path) == ('/docs/sub', '')

    @pytest.mark.asyncio
    async def test_empty_request(self):
        """Nothing requested, nothing listed."""
        lister = MemoryLister({})
        assert await Forest(lister).generate('root-id', []) == []
        assert lister.calls == []

    @pytest.mark.asyncio
    async def test_duplicate_requests_yield_one_entry(self, test_tree):
        """Repeated paths are one unit of work and one entry."""
        lister = MemoryLister(test_tree)
        entries = await Forest(lister).generate('root-id', [
            '/foo/explicit', '/foo/explicit', '/foo/sub/*', '/foo/sub/*',
        ])

        assert [entry.path for entry in entries] == ['/foo/explicit', '/foo/sub/file1']
        assert lister.calls == ['/foo/sub', '/foo']

    @pytest.mark.asyncio
    async def test_folder_items_do_not_match_literal_paths(self, test_tree):
        """A literal request naming a folder is not found."""
        entries = await Forest(MemoryLister(test_tree)).generate('root-id', ['/foo/sub'])
        assert summarize(entries) == [('missing', '/foo/sub', 404)]


class TestLiteralPhase:
    """Test literal path resolution and the per-run folder cache."""

    @pytest.mark.asyncio
    async def test_one_listing_per_parent_folder(self):
        """N literal files in one folder cost one listing call."""
        lister = MemoryLister({
            '/blog': [file_item('/blog/a'), file_item('/blog/b')],
        })
        entries = await Forest(lister).generate('root-id', ['/blog/a', '/blog/b', '/blog/c'])

        assert lister.calls == ['/blog']
        assert summarize(entries) == [
            ('found', '/blog/a'),
            ('found', '/blog/b'),
            ('missing', '/blog/c', 404),
        ]

    @pytest.mark.asyncio
    async def test_folder_phase_listing_is_reused(self, test_tree):
        """A literal path below an already listed folder needs no new call."""
        lister = MemoryLister(test_tree)
        await Forest(lister).generate('root-id', ['/foo/*', '/foo/explicit', '/foo/sub/file1'])

        assert lister.calls == ['/foo', '/foo/sub']

    @pytest.mark.asyncio
    async def test_found_entry_carries_resource_path(self):
        """Literal matches use the web path; the resource path comes from the item."""
        lister = MemoryLister({
            '/blog': [file_item('/blog/post1', '/blog/post1.md', id='p1')],
        })
        entries = await Forest(lister).generate('root-id', ['/blog/post1'])

        assert len(entries) == 1
        assert entries[0].path == '/blog/post1'
        assert entries[0].resource_path == '/blog/post1.md'
        assert entries[0].item.id == 'p1'

    @pytest.mark.asyncio
    async def test_failing_parent_marks_folder_and_files(self):
        """A parent listing error becomes a Failed marker; its files are not found."""
        error = RuntimeError('forbidden')
        error.metadata = {'httpStatusCode': 403}
        lister = MemoryLister({'/secret': error})

        entries = await Forest(lister).generate('root-id', ['/secret/a', '/secret/b'])

        assert summarize(entries) == [
            ('failed', '/secret/*', 403, 'forbidden'),
            ('missing', '/secret/a', 404),
            ('missing', '/secret/b', 404),
        ]
        assert lister.calls == ['/secret']


class TestFailureIsolation:
    """Failures are recorded as data and never stop sibling traversal."""

    @pytest.mark.asyncio
    async def test_error_does_not_affect_sibling_subtree(self):
        lister = MemoryLister({
            '/blog': StatusCodeError('backend down', 500),
            '/documents': [file_item('/documents/a', '/documents/a.md')],
        })
        entries = await Forest(lister).generate('root-id', ['/blog/*', '/documents/*'])

        assert summarize(entries) == [
            ('failed', '/blog/*', 500, 'backend down'),
            ('found', '/documents/a'),
        ]

    @pytest.mark.asyncio
    async def test_error_after_discoveries_keeps_them(self):
        """Entries found before a failing folder stay in the result."""
        lister = MemoryLister({
            '/docs': [file_item('/docs/a'), folder_item('/docs/broken'), folder_item('/docs/ok')],
            '/docs/broken': StatusCodeError('unavailable', 503),
            '/docs/ok': [file_item('/docs/ok/b')],
        })
        entries = await Forest(lister).generate('root-id', ['/docs/*'])

        assert summarize(entries) == [
            ('found', '/docs/a'),
            ('failed', '/docs/broken/*', 503, 'unavailable'),
            ('found', '/docs/ok/b'),
        ]

    @pytest.mark.asyncio
    async def test_fail_fast_policy_raises(self, test_tree):
        forest = Forest(MemoryLister(test_tree), error_policy=FailFastPolicy())
        with pytest.raises(RuntimeError, match='boom'):
            await forest.generate('root-id', ['/bar/*'])

    @pytest.mark.asyncio
    async def test_threshold_policy_stops_after_limit(self):
        lister = MemoryLister({
            '/a': RuntimeError('a'),
            '/b': RuntimeError('b'),
        })
        forest = Forest(lister, error_policy=ThresholdPolicy(max_errors=1))
        with pytest.raises(ForestError, match='threshold'):
            await forest.generate('root-id', ['/a/*', '/b/*'])

    @pytest.mark.asyncio
    async def test_threshold_counts_each_run_separately(self):
        """Failures of an earlier run do not count against the next one."""
        forest = Forest(MemoryLister({'/a': RuntimeError('a')}), error_policy=ThresholdPolicy(max_errors=1))

        first = await forest.generate('root-id', ['/a/*'])
        second = await forest.generate('root-id', ['/a/*'])

        assert first == second == [Failed('/a/*', 500, 'a')]

    @pytest.mark.asyncio
    async def test_failed_folder_is_not_listed_again_for_literals(self, test_tree):
        lister = MemoryLister(test_tree)
        forest = Forest(lister, error_policy=ThresholdPolicy(max_errors=1))

        entries = await forest.generate('root-id', ['/bar/*', '/bar/x'])

        assert summarize(entries) == [
            ('failed', '/bar/*', 500, 'boom'),
            ('missing', '/bar/x', 404),
        ]
        assert lister.calls == ['/bar']


class TestDeduplication:
    """Colliding sanitized names within one listing."""

    @pytest.mark.asyncio
    async def test_smaller_fuzzy_distance_wins(self):
        lister = MemoryLister({
            '/d': [
                file_item('/d/x', sanitized_name='x', fuzzy_distance=2, id='far'),
                file_item('/d/x', sanitized_name='x', fuzzy_distance=0, id='near'),
            ],
        })
        entries = await Forest(lister).generate('root-id', ['/d/*'])

        assert len(entries) == 1
        assert entries[0].item.id == 'near'

    @pytest.mark.asyncio
    async def test_later_listing_overwrites_same_path(self):
        """Across listings the last write for a path wins."""
        lister = MemoryLister({
            '/a': [file_item('/shared', id='first')],
            '/b': [file_item('/shared', id='second')],
        })
        entries = await Forest(lister).generate('root-id', ['/a/*', '/b/*'])

        assert len(entries) == 1
        assert entries[0].item.id == 'second'


class TestCancellation:
    """The progress callback can abort a run."""

    @pytest.mark.asyncio
    async def test_abort_during_folder_listing(self, test_tree):
        entries = await Forest(MemoryLister(test_tree)).generate(
            'root-id', ['/foo/*'], lambda progress: False,
        )
        assert entries == []

    @pytest.mark.asyncio
    async def test_abort_during_explicit_listing(self, test_tree):
        entries = await Forest(MemoryLister(test_tree)).generate(
            'root-id', ['/foo/explicit'], lambda progress: False,
        )
        assert entries == []

    @pytest.mark.asyncio
    async def test_abort_on_nth_folder_discards_resolved_folders(self):
        """Results of already listed folders are discarded too."""
        lister = MemoryLister({
            '/a': [file_item('/a/1')],
            '/b': [file_item('/b/1')],
            '/c': [file_item('/c/1')],
        })
        polls = []

        async def progress_cb(progress):
            polls.append(progress)
            return len(polls) < 3

        entries = await Forest(lister).generate('root-id', ['/a/*', '/b/*', '/c/*'], progress_cb)

        assert entries == []
        assert lister.calls == ['/a', '/b']

    @pytest.mark.asyncio
    async def test_progress_reports_counts(self):
        lister = MemoryLister({
            '/a': [file_item('/a/1'), file_item('/a/2')],
            '/b': RuntimeError('nope'),
        })
        polls = []

        def progress_cb(progress):
            polls.append(progress)
            return True

        await Forest(lister).generate('root-id', ['/a/*', '/b/*', '/a/1'], progress_cb)

        assert polls == [
            Progress(total=0, processed=0, failed=0),
            Progress(total=2, processed=1, failed=0),
            Progress(total=3, processed=2, failed=1),
        ]

    @pytest.mark.asyncio
    async def test_only_false_aborts(self, test_tree):
        """A callback returning None keeps going."""
        entries = await Forest(MemoryLister(test_tree)).generate(
            'root-id', ['/foo/explicit'], lambda progress: None,
        )
        assert summarize(entries) == [('found', '/foo/explicit')]


class TestDeterminism:
    """Output order does not depend on discovery order."""

    @pytest.mark.asyncio
    async def test_repeated_runs_are_identical(self, test_tree):
        paths = ['/products/*', '/foo/*', '/zoo', '/bar/*']
        first = await Forest(MemoryLister(test_tree)).generate('root-id', paths)
        second = await Forest(MemoryLister(test_tree)).generate('root-id', list(reversed(paths)))

        assert summarize(first) == summarize(second)
        assert [entry.path for entry in first] == sorted(entry.path for entry in first)

    @pytest.mark.asyncio
    async def test_concurrent_listing_matches_sequential(self, test_tree):
        paths = ['/foo/*', '/bar/*', '/products/*', '/notexist/*', '/zoo']
        sequential = await Forest(MemoryLister(test_tree)).generate('root-id', paths)
        concurrent = await Forest(MemoryLister(test_tree), max_concurrent=3).generate('root-id', paths)

        assert summarize(concurrent) == summarize(sequential)

    @pytest.mark.asyncio
    async def test_concurrent_runs_do_not_share_state(self, test_tree):
        """One Forest instance can serve several generate() calls."""
        forest = Forest(MemoryLister(test_tree))
        first = await forest.generate('root-id', ['/foo/*'])
        second = await forest.generate('root-id', ['/zoo'])

        assert [entry.path for entry in first] == ['/foo/explicit', '/foo/file1', '/foo/sub/file1']
        assert [entry.path for entry in second] == ['/zoo']


class TestCompleteness:
    """Every literal request gets exactly one entry."""

    @pytest.mark.asyncio
    async def test_every_literal_path_is_present(self, test_tree):
        literals = ['/zoo', '/foo/explicit', '/nowhere/file', '/bar/x', '/foo/sub/file1']
        entries = await Forest(MemoryLister(test_tree)).generate('root-id', ['/bar/*'] + literals)
        paths = [entry.path for entry in entries]

        for literal in literals:
            assert paths.count(literal) == 1
        assert len(paths) == len(set(paths))

    @pytest.mark.asyncio
    async def test_missing_wildcard_is_not_found(self):
        entries = await Forest(MemoryLister({})).generate('root-id', ['/missing/*'])
        assert entries == [NotFound('/missing/*')]

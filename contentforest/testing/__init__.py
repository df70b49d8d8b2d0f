"""Testing utilities for ContentForest consumers."""

from .fixtures import (
    FakeBucket,
    FakeDriveClient,
    MemoryLister,
    file_item,
    folder_item,
)

__all__ = [
    'FakeBucket',
    'FakeDriveClient',
    'MemoryLister',
    'file_item',
    'folder_item',
]

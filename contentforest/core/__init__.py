"""Core abstractions for forest traversal.

This module defines the data model, the backend listing interface, the
traversal engine and the result assembly.
"""

from .items import (
    RawItem,
    WorkItem,
    Found,
    NotFound,
    Failed,
    ResultEntry,
    Progress,
)
from .lister import FolderLister
from .forest import Forest, ProgressCallback
from .assembler import (
    SourceInfo,
    ResourceInfo,
    ResourceDescriptor,
    assemble,
    to_dicts,
)

__all__ = [
    # Data model
    'RawItem',
    'WorkItem',
    'Found',
    'NotFound',
    'Failed',
    'ResultEntry',
    'Progress',
    # Lister
    'FolderLister',
    # Engine
    'Forest',
    'ProgressCallback',
    # Assembly
    'SourceInfo',
    'ResourceInfo',
    'ResourceDescriptor',
    'assemble',
    'to_dicts',
]

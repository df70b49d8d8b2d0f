"""ContentForest - resource-tree discovery for external content sources.

ContentForest walks the folder hierarchy of a site's content source
(shared drive, workbook store, object store) and turns a list of
requested paths into one flat, sorted list of resource descriptors.

Typical use:
━━━━━━━━━━━━━━━━━━━━━━━━━━
    from contentforest import list_resources

    resources = await list_resources(context, info, ['/docs/*', '/blog/post1'])
━━━━━━━━━━━━━━━━━━━━━━━━━━

Custom backends implement ``FolderLister.list_folder`` and are driven
by ``Forest``.
"""

__version__ = "0.1.0"

# core must load before paths and error_policies, which import from it
from .core import (
    RawItem,
    WorkItem,
    Found,
    NotFound,
    Failed,
    Progress,
    FolderLister,
    Forest,
    SourceInfo,
    ResourceInfo,
    assemble,
    to_dicts,
)
from .config import (
    SourceType,
    ContentSource,
    ForestConfig,
    AdminContext,
    RequestInfo,
)
from .errors import (
    ForestError,
    SourceConfigError,
    StatusCodeError,
    NotFoundError,
    RateLimitError,
    status_from_error,
)
from .error_policies import (
    ErrorPolicy,
    RecordFailuresPolicy,
    FailFastPolicy,
    ThresholdPolicy,
)
from .api import (
    HANDLERS,
    get_content_source_handler,
    list_resources,
)

__all__ = [
    "__version__",
    # Core
    "RawItem",
    "WorkItem",
    "Found",
    "NotFound",
    "Failed",
    "Progress",
    "FolderLister",
    "Forest",
    "SourceInfo",
    "ResourceInfo",
    "assemble",
    "to_dicts",
    # Configuration
    "SourceType",
    "ContentSource",
    "ForestConfig",
    "AdminContext",
    "RequestInfo",
    # Errors
    "ForestError",
    "SourceConfigError",
    "StatusCodeError",
    "NotFoundError",
    "RateLimitError",
    "status_from_error",
    "ErrorPolicy",
    "RecordFailuresPolicy",
    "FailFastPolicy",
    "ThresholdPolicy",
    # API
    "HANDLERS",
    "get_content_source_handler",
    "list_resources",
]

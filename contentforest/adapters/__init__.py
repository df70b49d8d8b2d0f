"""Backend listers for the supported content sources.

Each module bridges one remote system (drive, workbook store, object
store, markup origin) to the generic forest interface.
"""

from .google import GoogleDriveLister
from .onedrive import OneDriveLister
from .sourcebus import SourceBusLister
from .markup import ALLOWED_MARKUP_TYPES, list_markup

__all__ = [
    'GoogleDriveLister',
    'OneDriveLister',
    'SourceBusLister',
    'ALLOWED_MARKUP_TYPES',
    'list_markup',
]

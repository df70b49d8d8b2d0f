"""Path classification and resource-path mapping.

Pure functions, no I/O. The classifier splits requested paths into
wildcard subtree work and literal file work; the mapping helpers turn
backend-native item names into web paths and resource paths.
"""

import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple
from urllib.parse import urljoin, urlsplit

from .core.items import RawItem, WorkItem


WILDCARD_SUFFIX = "/*"
_UNSAFE_CHARS = re.compile(r"[^a-z0-9]+")


class ItemKind(Enum):
    """How a backend item maps into the destination namespace."""
    DOCUMENT = "document"         # -> .md
    SPREADSHEET = "spreadsheet"   # -> .json
    FOLDER = "folder"             # -> descended into
    FILE = "file"                 # -> passed through with its own extension


@dataclass(frozen=True)
class PrefixedPath:
    """One classified request: either a subtree ``prefix`` or a literal ``path``."""
    prefix: Optional[str] = None
    path: Optional[str] = None


def process_prefixed_paths(paths: Iterable[str]) -> List[PrefixedPath]:
    """Split requested paths into subtree prefixes and literal paths.

    ``/docs/*`` becomes the prefix ``/docs/``; anything else is literal.
    Both kinds are deduplicated, keeping first-seen order.
    """
    seen = set()
    result = []
    for path in paths:
        if path in seen:
            continue
        seen.add(path)
        if path.endswith(WILDCARD_SUFFIX):
            result.append(PrefixedPath(prefix=path[:-1]))
        else:
            result.append(PrefixedPath(path=path))
    return result


def classify_paths(root_handle: Any, paths: Iterable[str]) -> Tuple[List[WorkItem], List[str]]:
    """Turn requested paths into folder work and literal file paths.

    Args:
        root_handle: Backend handle of the content source root
        paths: Requested paths, literal or ending in ``/*``

    Returns:
        Tuple of (folder work items, literal file paths)
    """
    folder_work = []
    file_paths = []
    for entry in process_prefixed_paths(paths):
        if entry.prefix is not None:
            folder_work.append(WorkItem(
                root_handle=root_handle,
                root_path="",
                rel_path=entry.prefix[:-1],
            ))
        else:
            file_paths.append(entry.path)
    return folder_work, file_paths


def parent_folder(path: str) -> str:
    """Folder part of a literal path, without trailing slash ('' for root)."""
    idx = path.rfind("/")
    return path[:idx] if idx >= 0 else ""


# Name helpers

def sanitize_name(name: str) -> str:
    """Make a display name legal in the destination namespace.

    Lowercases, strips diacritics, replaces runs of anything other than
    ``a-z0-9`` with a single dash and trims dashes at both ends.
    """
    normalized = unicodedata.normalize("NFD", name.lower())
    stripped = "".join(c for c in normalized if not unicodedata.combining(c))
    return _UNSAFE_CHARS.sub("-", stripped).strip("-")


def split_by_extension(name: str) -> Tuple[str, str]:
    """Split ``name`` into base name and lowercase extension (without dot).

    A leading or trailing dot does not count as an extension separator.
    """
    idx = name.rfind(".")
    if 0 < idx < len(name) - 1:
        return name[:idx], name[idx + 1:].lower()
    return name, ""


def split_extension(filename: str) -> Tuple[str, str]:
    """Split ``filename`` into base name and extension (with dot, case kept)."""
    idx = filename.rfind(".")
    if idx > 0:
        return filename[:idx], filename[idx:]
    return filename, ""


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance between two strings."""
    if a == "" or b == "":
        return max(len(a), len(b))

    previous = list(range(len(b) + 1))
    for i in range(1, len(a) + 1):
        current = [i] + [0] * len(b)
        for j in range(1, len(b) + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            current[j] = min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + cost,
            )
        previous = current

    return previous[len(b)]


def to_resource_path(path: str) -> str:
    """Compute the resource path for a web path.

    Examples:
        to_resource_path("/blog/") -> "/blog/index.md"
        to_resource_path("/blog/post1") -> "/blog/post1.md"
        to_resource_path("/blog/post1.plain.html") -> "/blog/post1.md"
        to_resource_path("/data/sheet.json") -> "/data/sheet.json"
        to_resource_path("relative") -> ""
    """
    if not path.startswith("https://") and not path.startswith("/"):
        return ""

    pathname = urlsplit(urljoin("https://localhost", path)).path or "/"
    segs = pathname.split("/")[1:]
    filename = segs.pop()

    basename, ext = split_extension(filename)
    if not basename:
        return _combine(segs, "index.md")
    if not ext:
        return _combine(segs, f"{basename}.md")
    if basename.endswith(".plain"):
        return _combine(segs, f"{basename[:-6]}.md")
    return _combine(segs, f"{basename}{ext}")


def _combine(segs: List[str], filename: str) -> str:
    return "/" + "/".join([*segs, filename])


# Item mapping

def map_item(
    parent_path: str,
    name: str,
    kind: ItemKind,
    skip_markdown: bool = True,
) -> Optional[RawItem]:
    """Map a backend item into the destination namespace.

    An item named ``index`` (folders included) stands for its parent
    directory. The fuzzy distance is measured between the sanitized name,
    extension included, and the native base name.

    Args:
        parent_path: Absolute path of the folder being listed ('' for root)
        name: Native item name, e.g. ``My Post.docx``
        kind: What the backend says the item is
        skip_markdown: Drop stray ``.md`` files (backends whose markdown is derived)

    Returns:
        A RawItem with name, paths, extension, sanitized name and fuzzy
        distance filled in, or None if the item must be skipped
    """
    item_name, ext = split_by_extension(name)
    sanitized_base = sanitize_name(item_name)
    sanitized = f"{sanitized_base}.{ext}" if ext else sanitized_base

    item = RawItem(
        name=name,
        path="",
        resource_path="",
        sanitized_name=sanitized,
        fuzzy_distance=edit_distance(sanitized, item_name),
    )
    if sanitized == "index" or (kind == ItemKind.DOCUMENT and sanitized_base == "index"):
        item.path = f"{parent_path}/"
        item.resource_path = f"{parent_path}/index.md"
        item.ext = ".md"
    elif kind == ItemKind.DOCUMENT:
        item.path = f"{parent_path}/{sanitized_base}"
        item.resource_path = f"{item.path}.md"
        item.ext = ".md"
    elif kind == ItemKind.SPREADSHEET:
        item.path = f"{parent_path}/{sanitized_base}.json"
        item.resource_path = item.path
        item.ext = ".json"
    elif kind == ItemKind.FOLDER:
        item.is_file = False
        item.path = f"{parent_path}/{sanitized_base}"
        item.resource_path = item.path
    elif skip_markdown and ext == "md":
        return None
    else:
        item.path = f"{parent_path}/{sanitized}"
        item.resource_path = item.path
        item.ext = f".{ext}" if ext else ""
    return item


def dedupe_items(items: Iterable[RawItem]) -> List[RawItem]:
    """Collapse items of one folder listing that share a sanitized name.

    The item whose name needed fewer edits to become legal wins; on a tie
    the first one listed stays. Items without a sanitized name are keyed
    by their path.
    """
    kept = {}
    for item in items:
        key = item.sanitized_name or item.path
        existing = kept.get(key)
        if existing is None or existing.fuzzy_distance > item.fuzzy_distance:
            kept[key] = item
    return list(kept.values())

"""Path normalization and file-kind checks for page and view files.

Maps a page file's position (or an explicit ``path``) to its route:

    index.md                 -> /
    about.json               -> /about
    blog/index/index.yaml    -> /blog
    //about//                -> /about
"""

import re
from pathlib import Path

# Structured-data descriptors
DATA_SUFFIXES: frozenset[str] = frozenset({".json", ".yaml", ".yml", ".toml"})

# Computed descriptors and views
MODULE_SUFFIXES: frozenset[str] = frozenset({".py"})

# Front matter + Markdown body
MARKDOWN_SUFFIXES: frozenset[str] = frozenset({".md", ".markdown"})

PAGE_SUFFIXES: frozenset[str] = DATA_SUFFIXES | MODULE_SUFFIXES | MARKDOWN_SUFFIXES

VIEW_SUFFIXES: frozenset[str] = MODULE_SUFFIXES

_PAGE_SUFFIX_RE = re.compile(
    r"(?:\.(?:" + "|".join(sorted(s[1:] for s in PAGE_SUFFIXES)) + r"))+$",
    re.IGNORECASE,
)

_INDEX = "index"


def clean_path(path: str) -> str:
    """Normalize a page file name or explicit path into a route path.

    Total and idempotent: every string maps to a path starting with ``/``.
    ``index`` segments collapse into their parent, so ``blog/index.md`` and
    ``blog/index/index.md`` both serve ``/blog``.

    """
    segments = [s for s in path.replace("\\", "/").split("/") if s]

    # Trailing segment: strip the page suffix, dropping it entirely when
    # nothing but an index (or the bare suffix) remains.
    while segments:
        last = _PAGE_SUFFIX_RE.sub("", segments[-1])
        if last and last != _INDEX:
            segments[-1] = last
            break
        segments.pop()

    segments = [s for s in segments if s != _INDEX]
    return "/" + "/".join(segments)


def has_suffix(file_path: Path, suffixes: frozenset[str]) -> bool:
    """Whether *file_path* ends with one of *suffixes* (case-insensitive)."""
    return file_path.suffix.lower() in suffixes


def is_valid_file(file_path: Path, suffixes: frozenset[str]) -> bool:
    """Whether *file_path* is an existing regular file with a supported suffix."""
    return file_path.is_file() and has_suffix(file_path, suffixes)


def is_private(relative: Path) -> bool:
    """Whether a path under the pages directory should be skipped.

    Files starting with ``_`` or ``.`` are helpers or editor leftovers, and
    ``__pycache__`` holds bytecode for page modules.

    """
    if "__pycache__" in relative.parts:
        return True
    return relative.name.startswith(("_", "."))

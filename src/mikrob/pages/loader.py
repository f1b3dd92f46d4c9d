"""Page loader — read page descriptors and build the page index.

Scans a ``pages/`` directory and turns every descriptor into a PageData
using a file-path convention:

    pages/index.md            -> /
    pages/about.json          -> /about
    pages/blog/index.yaml     -> /blog
    pages/blog/01-uno.md      -> path: /blog/uno  (explicit override)

Descriptor kinds, by suffix:

    .json .yaml .yml .toml    structured data
    .py                       module exporting ``page`` (a mapping, or a
                              sync/async callable returning one)
    .md .markdown             front matter + Markdown body (``body``)

Descriptor keys with a meaning of their own:

    path: str        — override URL path (default: derived from file path)
    status: int      — response status (redirect status for redirects)
    view: str        — view module, relative to the views directory
    redirect: str    — redirect destination; the page needs no view

Any other key is passed to the view untouched.  Broken descriptors are
reported through the diagnostics channel and left out of the index.
"""

import hashlib
import importlib.util
import inspect
import json
import re
import sys
import tomllib
from pathlib import Path
from types import ModuleType
from typing import Any

import yaml

from mikrob._errors import PageError
from mikrob._types import MarkdownRenderer
from mikrob.diagnostics import NO_PAGE_EXPORT, show_warn
from mikrob.pages.markdown import create_markdown_renderer, parse_markdown_page
from mikrob.pages.paths import (
    DATA_SUFFIXES,
    MARKDOWN_SUFFIXES,
    MODULE_SUFFIXES,
    PAGE_SUFFIXES,
    clean_path,
    has_suffix,
    is_private,
    is_valid_file,
)
from mikrob.pages.records import PageData

# Module attribute holding a computed page descriptor
PAGE_EXPORT = "page"


def load_module(file_path: Path, module_name: str) -> ModuleType:
    """Import a Python file as a module without touching ``sys.path``.

    Uses ``importlib.util.spec_from_file_location`` for isolated loading.  The
    module is registered in ``sys.modules`` under *module_name*, replacing any
    previous build's module.  No parent package is created, so the file can
    use absolute imports only.

    Raises:
        ImportError: If no loader can be created for *file_path*.
        Exception: Whatever executing the module raises.

    """
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    if spec is None or spec.loader is None:
        msg = f"Cannot import {file_path}"
        raise ImportError(msg)

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module


def module_name_for(file_path: Path, base_dir: Path, namespace: str) -> str:
    """Build a flat, unique module name for *file_path*.

    pages/blog/my-post.py -> mikrob_pages_blog_my_post_<hash>.  The hash of
    the resolved path keeps files like ``a-b.py`` and ``a_b.py`` apart.

    """
    try:
        parts = file_path.relative_to(base_dir).with_suffix("").parts
    except ValueError:
        parts = (file_path.stem,)
    safe = "_".join(re.sub(r"\W", "_", part) for part in parts)
    digest = hashlib.sha1(str(file_path.resolve()).encode(), usedforsecurity=False).hexdigest()[:8]
    return f"{namespace}_{safe}_{digest}"


async def load_page_module(file_path: Path, pages_dir: Path) -> Any:
    """Evaluate a ``.py`` descriptor and return its ``page`` export.

    ``page`` may be a mapping, or a callable (sync or async) returning one.

    Raises:
        PageError: If the module has no ``page`` export.

    """
    module = load_module(file_path, module_name_for(file_path, pages_dir, "mikrob_pages"))
    if not hasattr(module, PAGE_EXPORT):
        raise PageError(NO_PAGE_EXPORT)

    value = getattr(module, PAGE_EXPORT)
    if callable(value):
        value = value()
    if inspect.isawaitable(value):
        value = await value
    return value


def load_data_file(file_path: Path) -> Any:
    """Parse a structured-data descriptor (JSON, YAML or TOML)."""
    text = file_path.read_text(encoding="utf-8")
    suffix = file_path.suffix.lower()
    if suffix == ".json":
        return json.loads(text)
    if suffix == ".toml":
        return tomllib.loads(text)
    return yaml.safe_load(text)


def load_markdown(file_path: Path, render: MarkdownRenderer) -> dict[str, Any]:
    """Parse a front matter + Markdown descriptor."""
    return parse_markdown_page(file_path.read_text(encoding="utf-8"), render)


def build_page_data(
    descriptor: dict[str, Any],
    file_path: Path,
    file_name: str,
    views_dir: Path,
) -> PageData:
    """Merge a raw descriptor into a PageData.

    Raises:
        PageError: If a known key has the wrong type.

    """
    data = dict(descriptor)
    data.pop("file", None)
    path = data.pop("path", None)
    status = data.pop("status", None)
    view = data.pop("view", None)
    redirect = data.pop("redirect", None)

    if path is not None and not isinstance(path, str):
        msg = f"'path' must be a str, got {type(path).__name__}"
        raise PageError(msg)
    if status is not None and (isinstance(status, bool) or not isinstance(status, int)):
        msg = f"'status' must be an int, got {type(status).__name__}"
        raise PageError(msg)
    if view is not None and not isinstance(view, str):
        msg = f"'view' must be a str, got {type(view).__name__}"
        raise PageError(msg)
    if redirect is not None and not isinstance(redirect, str):
        msg = f"'redirect' must be a str, got {type(redirect).__name__}"
        raise PageError(msg)

    return PageData(
        file=file_path,
        path=clean_path(path or file_name),
        view=views_dir / view if view else None,
        status=status,
        redirect=redirect or None,
        data=data,
    )


async def load_page(
    file_name: str | Path,
    pages_dir: Path,
    views_dir: Path,
    *,
    markdown: MarkdownRenderer | None = None,
) -> PageData | None:
    """Load one descriptor, relative to *pages_dir*, into a PageData.

    Returns *None* for unsupported files, empty descriptors, and descriptors
    that fail to load (the latter are reported via the diagnostics channel).

    """
    file_path = Path(pages_dir, file_name).absolute()
    if not is_valid_file(file_path, PAGE_SUFFIXES):
        return None

    try:
        if has_suffix(file_path, MODULE_SUFFIXES):
            descriptor = await load_page_module(file_path, pages_dir)
        elif has_suffix(file_path, DATA_SUFFIXES):
            descriptor = load_data_file(file_path)
        elif has_suffix(file_path, MARKDOWN_SUFFIXES):
            descriptor = load_markdown(file_path, markdown or create_markdown_renderer())
        else:
            return None

        if not descriptor:
            return None
        if not isinstance(descriptor, dict):
            msg = f"Page descriptor must be a mapping, got {type(descriptor).__name__}"
            raise PageError(msg)

        return build_page_data(descriptor, file_path, str(file_name), views_dir)
    except Exception as exc:  # page modules run arbitrary code
        return show_warn(file_path, exc)


def sort_pages(pages: list[PageData]) -> list[PageData]:
    """Order pages for route registration.

    Deeper files come first so nested routes take priority; files at the same
    depth are ordered by their absolute path, compared by code point.  The
    order is case-sensitive and locale-independent, so ``B.json`` sorts
    before ``a.json``.

    """
    return sorted(pages, key=lambda page: (-len(page.file.parts), str(page.file)))


async def load_pages(
    pages_dir: Path,
    views_dir: Path,
    *,
    markdown: MarkdownRenderer | None = None,
) -> list[PageData]:
    """Scan *pages_dir* for descriptors and return the sorted page index.

    Skips files starting with ``_`` or ``.`` and ``__pycache__`` contents.
    Returns an empty list when *pages_dir* does not exist.

    """
    if not pages_dir.is_dir():
        return []

    render = markdown or create_markdown_renderer()
    pages: list[PageData] = []

    for file_path in sorted(pages_dir.rglob("*")):
        relative = file_path.relative_to(pages_dir)
        if is_private(relative) or not file_path.is_file():
            continue

        page = await load_page(relative.as_posix(), pages_dir, views_dir, markdown=render)
        if page is not None:
            pages.append(page)

    return sort_pages(pages)

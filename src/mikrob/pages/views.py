"""View resolution — find the render function a page names.

A view is a Python module in the views directory exporting a ``view``
callable::

    # views/post.py
    def view(request, pages, page):
        return f"<h1>{page['title']}</h1>{page['body']}"

Resolution never raises.  Every failure is reported through the
diagnostics channel and resolves to *None*, which keeps the page out of the
route table.
"""

from pathlib import Path

from mikrob._types import PageView
from mikrob.diagnostics import (
    NO_DEFAULT_EXPORT,
    NO_VIEW_DEFINED,
    VIEW_NOT_FOUND_OR_NOT_SUPPORTED,
    show_warn,
)
from mikrob.pages.loader import load_module, module_name_for
from mikrob.pages.paths import VIEW_SUFFIXES, is_valid_file
from mikrob.pages.records import PageData

# Module attribute holding the render function
VIEW_EXPORT = "view"


class ViewLoader:
    """Resolves page views, loading each view module once per build.

    A new ViewLoader is created for every index build so edited views are
    picked up by the next rebuild.

    Args:
        views_dir: Views directory, used to name the loaded modules.

    """

    __slots__ = ("_cache", "_views_dir")

    def __init__(self, views_dir: Path | None = None) -> None:
        self._views_dir = views_dir
        self._cache: dict[Path, PageView | None] = {}

    def load(self, page: PageData) -> PageView | None:
        """Return the view for *page*, or *None* if it cannot be used."""
        view = page.view

        if view is None:
            return show_warn(page.file, NO_VIEW_DEFINED)

        if view in self._cache:
            return self._cache[view]

        resolved = self._load_view_file(view)
        self._cache[view] = resolved
        return resolved

    def _load_view_file(self, view: Path) -> PageView | None:
        if not is_valid_file(view, VIEW_SUFFIXES):
            return show_warn(view, VIEW_NOT_FOUND_OR_NOT_SUPPORTED)

        base_dir = self._views_dir or view.parent
        try:
            module = load_module(view, module_name_for(view, base_dir, "mikrob_views"))
        except Exception as exc:  # view modules run arbitrary code
            return show_warn(view, exc)

        page_view = getattr(module, VIEW_EXPORT, None)
        if not callable(page_view):
            return show_warn(view, NO_DEFAULT_EXPORT)

        return page_view


def load_view(page: PageData) -> PageView | None:
    """Resolve the view for a single page, without a shared cache."""
    return ViewLoader().load(page)

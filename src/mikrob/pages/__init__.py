"""Page discovery — descriptors on disk to an ordered page index.

Public API::

    from mikrob.pages import load_pages, load_view

    pages = await load_pages(Path("pages"), Path("views"))
    view = load_view(pages[0])
"""

from mikrob.pages.loader import load_page, load_pages, sort_pages
from mikrob.pages.paths import clean_path
from mikrob.pages.records import PageData
from mikrob.pages.views import ViewLoader, load_view

__all__ = [
    "PageData",
    "ViewLoader",
    "clean_path",
    "load_page",
    "load_pages",
    "load_view",
    "sort_pages",
]

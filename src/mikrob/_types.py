"""Shared type definitions for mikrob."""

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mikrob.pages.records import PageData

# Route URL path or pattern (e.g., "/blog", "/posts/{slug}", "/*")
type RoutePath = str

# Ordered page index; order is route registration priority
type PageList = Sequence[PageData]

# A view: view(request=..., pages=..., page=...) -> markup | raw response
type PageView = Callable[..., Any]

# Async chirp route handler
type Handler = Callable[..., Any]

# Markdown source -> HTML
type MarkdownRenderer = Callable[[str], str]

# Static-serving capability: serve_static(root) -> chirp middleware
type StaticServer = Callable[..., Any]

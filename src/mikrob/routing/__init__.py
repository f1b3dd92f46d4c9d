"""Routing — compile the page index into Chirp routes.

Public API::

    from mikrob.routing import create_pages

    router = create_pages(app, pages)
    router.routes  # registered routes, in registration order
"""

from mikrob.routing.compiler import (
    CompiledRoute,
    PageRouter,
    create_page,
    create_pages,
    route_pattern,
    route_shape,
)

__all__ = [
    "CompiledRoute",
    "PageRouter",
    "create_page",
    "create_pages",
    "route_pattern",
    "route_shape",
]

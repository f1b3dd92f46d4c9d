"""Route compiler — serves loaded pages as Chirp routes.

Every page in the index becomes one ``GET`` route at ``page.path``,
registered in index order.  Redirect pages answer with a redirect; every
other page needs a usable view, or it gets no route at all.

Page paths use Chirp's pattern syntax (``/posts/{slug}``,
``/files/{rest:path}``).  Two shorthands are translated:

    /docs/*         -> /docs/{path:path}   (catch-all)
    /posts/:slug    -> /posts/{slug}

A catch-all page also answers its bare prefix (``/*`` answers ``/``,
``/docs/*`` answers ``/docs``) unless another page claims that path.
"""

from __future__ import annotations

import inspect
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from chirp.http.request import Request
from chirp.http.response import Redirect, Response, SSEResponse, StreamingResponse

from mikrob.diagnostics import DUPLICATE_ROUTE, PARAM_CONFLICT, show_warn
from mikrob.pages.views import ViewLoader
from mikrob.rendering import render

if TYPE_CHECKING:
    from chirp import App

    from mikrob._types import Handler, PageList, PageView, RoutePath
    from mikrob.pages.records import PageData

# View results returned to Chirp as they are, bypassing the renderer
RAW_RESPONSE_TYPES: tuple[type, ...] = (Response, Redirect, StreamingResponse, SSEResponse)

DEFAULT_REDIRECT_STATUS = 302

_CATCH_ALL = "{path:path}"

_PARAM = re.compile(r"^\{([^}:]*)(?::([^}]*))?\}$")

# Shape tokens for parameter and catch-all segments
_PARAM_TOKEN = "{}"
_CATCH_ALL_TOKEN = "*"

type Shape = tuple[str, ...]


def _parse_param(segment: str) -> tuple[str, str] | None:
    """Return ``(name, converter)`` for a ``{...}`` segment, else None."""
    match = _PARAM.match(segment)
    if match is None:
        return None
    return match.group(1), match.group(2) or "str"


def route_shape(pattern: str) -> Shape:
    """Reduce a Chirp *pattern* to the router position it is stored at.

    Chirp keeps a single parameter edge and a single catch-all edge per trie
    level, so parameter names and converters do not tell routes apart:
    ``/blog/{slug}``, ``/blog/{id}`` and ``/blog/{id:int}`` all share the
    shape ``("blog", "{}")``, and ``/docs/{path:path}`` and
    ``/docs/{rest:path}`` share ``("docs", "*")``.

    """
    shape: list[str] = []
    for segment in pattern.split("/"):
        if not segment:
            continue
        param = _parse_param(segment)
        if param is None:
            shape.append(segment)
        elif param[1] == "path":
            shape.append(_CATCH_ALL_TOKEN)
            break
        else:
            shape.append(_PARAM_TOKEN)
    return tuple(shape)


def _param_edges(pattern: str) -> list[tuple[Shape, tuple[str, str]]]:
    """List ``(prefix shape, (name, converter))`` for each parameter segment."""
    edges: list[tuple[Shape, tuple[str, str]]] = []
    prefix: list[str] = []
    for segment in pattern.split("/"):
        if not segment:
            continue
        param = _parse_param(segment)
        if param is None:
            prefix.append(segment)
            continue
        if param[1] == "path":
            break
        edges.append((tuple(prefix), param))
        prefix.append(_PARAM_TOKEN)
    return edges


def _prefix_pattern(pattern: str) -> str:
    """Drop the trailing catch-all segment of *pattern*."""
    head = pattern.rstrip("/").rsplit("/", 1)[0]
    return head or "/"


def route_pattern(path: RoutePath) -> str:
    """Translate a page path into a Chirp route pattern.

    ``*`` becomes a catch-all parameter (anything after it is dropped, a
    catch-all consumes the rest of the URL) and ``:name`` becomes ``{name}``.

    """
    segments: list[str] = []
    for segment in path.split("/"):
        if not segment:
            continue
        if segment == "*":
            segments.append(_CATCH_ALL)
            break
        if segment.startswith(":") and len(segment) > 1:
            segments.append("{" + segment[1:] + "}")
        else:
            segments.append(segment)
    return "/" + "/".join(segments)


def create_page(
    page: PageData,
    pages: PageList,
    *,
    views: ViewLoader | None = None,
) -> Handler | None:
    """Compile *page* into a Chirp route handler.

    Returns *None* when the page has no redirect and its view cannot be
    resolved (the view loader has already reported why).

    """
    if page.redirect:
        return _make_redirect_handler(page)

    page_view = (views or ViewLoader()).load(page)
    if page_view is None:
        return None

    return _make_view_handler(page, pages, page_view)


def _make_redirect_handler(page: PageData) -> Handler:
    destination = page.redirect or "/"
    status = page.status or DEFAULT_REDIRECT_STATUS

    async def redirect_handler(request: Request) -> Any:
        return Redirect(destination, status=status)

    return redirect_handler


def _make_view_handler(page: PageData, pages: PageList, page_view: PageView) -> Handler:
    """Create a handler that calls *page_view* and renders what it returns.

    Raw responses (``Response``, ``Redirect``, streams) are returned
    verbatim.  ``None`` and strings go through the rendering middleware with
    the page's status.  Other values (``Template``, ``Fragment``, ...) are
    left to Chirp's content negotiation.  Exceptions raised by the view
    propagate to Chirp's error handling.

    """
    status = page.status

    async def page_handler(request: Request) -> Any:
        result = page_view(request=request, pages=pages, page=page)
        if inspect.isawaitable(result):
            result = await result

        if isinstance(result, RAW_RESPONSE_TYPES):
            return result
        if result is None or isinstance(result, str):
            return render(result or "", status=status or 200)
        if status is not None:
            return result, status
        return result

    return page_handler


def _make_prefix_handler(handler: Handler, param_name: str) -> Handler:
    """Serve a catch-all *handler* at its bare prefix, with an empty capture."""

    async def prefix_handler(request: Request) -> Any:
        request.path_params.setdefault(param_name, "")
        return await handler(request=request)

    return prefix_handler


@dataclass(frozen=True, slots=True)
class CompiledRoute:
    """A page registered as a route.

    Attributes:
        pattern: Chirp route pattern the page is served at.
        page: The page behind the route.
        handler: Registered request handler.

    """

    pattern: str
    page: PageData
    handler: Handler


class PageRouter:
    """Registers a page index on a Chirp app, in index order.

    Args:
        app: Chirp App to register routes on (must not yet be frozen).
        pages: The page index; its order is the registration order.
        views: View loader shared by every page of this build.

    """

    def __init__(self, app: App, pages: PageList, *, views: ViewLoader | None = None) -> None:
        self._app = app
        self._pages = pages
        self._views = views or ViewLoader()
        self._routes: list[CompiledRoute] = []

    @property
    def routes(self) -> tuple[CompiledRoute, ...]:
        """Registered routes, in registration order."""
        return tuple(self._routes)

    @property
    def page_count(self) -> int:
        """Number of pages registered as routes."""
        return len({id(route.page) for route in self._routes})

    def register_pages(self) -> None:
        """Compile and register every page.

        Pages that fail to compile are skipped.  When two pages land on the
        same router position (see :func:`route_shape`) the first one in the
        index keeps it and the later one gets a diagnostic.  The same holds
        for a parameter segment whose name or converter differs from the one
        an earlier page already put at that position.

        Index order only decides between pages of the same shape.  Between
        different shapes Chirp's own precedence applies: a literal segment
        beats a parameter, which beats a catch-all, so ``/blog/:slug`` answers
        ``/blog/x`` even when ``/blog/*`` comes first in the index.

        Must be called before the Chirp app is frozen (before first request).

        """
        seen: dict[Shape, PageData] = {}
        edges: dict[Shape, tuple[tuple[str, str], PageData]] = {}
        catch_alls: list[CompiledRoute] = []

        for page in self._pages:
            pattern = route_pattern(page.path)
            shape = route_shape(pattern)
            if shape in seen:
                show_warn(page.file, DUPLICATE_ROUTE.format(path=pattern, other=seen[shape].file))
                continue
            if self._param_conflict(page, pattern, edges):
                continue

            handler = create_page(page, self._pages, views=self._views)
            if handler is None:
                continue

            route = self._register(pattern, page, handler)
            seen[shape] = page
            for prefix, param in _param_edges(pattern):
                edges.setdefault(prefix, (param, page))
            if shape[-1:] == (_CATCH_ALL_TOKEN,):
                catch_alls.append(route)

        # Bare prefixes go last so any page that claims one keeps it.
        for route in catch_alls:
            prefix = _prefix_pattern(route.pattern)
            shape = route_shape(prefix)
            if shape in seen:
                continue
            param_name = _parse_param(route.pattern.rsplit("/", 1)[-1])
            handler = _make_prefix_handler(route.handler, param_name[0] if param_name else "path")
            self._register(prefix, route.page, handler)
            seen[shape] = route.page

    def _param_conflict(
        self,
        page: PageData,
        pattern: str,
        edges: dict[Shape, tuple[tuple[str, str], PageData]],
    ) -> bool:
        for prefix, param in _param_edges(pattern):
            claimed = edges.get(prefix)
            if claimed is not None and claimed[0] != param:
                (name, converter), other = claimed
                show_warn(
                    page.file,
                    PARAM_CONFLICT.format(
                        path=pattern, param=f"{{{name}:{converter}}}", other=other.file
                    ),
                )
                return True
        return False

    def _register(self, pattern: str, page: PageData, handler: Handler) -> CompiledRoute:
        index = len(self._routes)
        handler.__name__ = f"page_{index}"
        handler.__qualname__ = f"PageRouter.page_{index}"

        self._app.route(pattern, name=f"page:{pattern}")(handler)
        route = CompiledRoute(pattern=pattern, page=page, handler=handler)
        self._routes.append(route)
        return route


def create_pages(app: App, pages: PageList, *, views: ViewLoader | None = None) -> PageRouter:
    """Register *pages* on *app* and return the router holding the routes."""
    router = PageRouter(app, pages, views=views)
    router.register_pages()
    return router

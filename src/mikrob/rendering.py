"""Rendering middleware — turns view markup into HTML responses.

The middleware installs its ``render`` function on the request-scoped
``chirp.context.g`` namespace.  Page handlers pass view markup through
``g.render``; views that build their own response skip it entirely.
"""

from chirp.context import g
from chirp.http.request import Request
from chirp.http.response import Response
from chirp.middleware.protocol import AnyResponse, Next

DOCTYPE = "<!DOCTYPE html>"


class Renderer:
    """Middleware that renders page markup into full HTML documents.

    Usage::

        app.add_middleware(Renderer())

    Args:
        doctype: Prefix documents with ``<!DOCTYPE html>`` unless the markup
            already declares a doctype.

    """

    __slots__ = ("_doctype",)

    def __init__(self, *, doctype: bool = True) -> None:
        self._doctype = doctype

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        g.render = self.render
        return await next(request)

    def render(self, markup: object, *, status: int = 200) -> Response:
        """Wrap *markup* in an HTML response.  *None* renders an empty document."""
        body = "" if markup is None else str(markup)
        if self._doctype and not body.lstrip()[:9].lower().startswith("<!doctype"):
            body = DOCTYPE + body
        return Response(body=body, status=status)


def render(markup: object, *, status: int = 200) -> Response:
    """Render with the active request's renderer, or the default one."""
    renderer = g.get("render")
    if renderer is None:
        return _DEFAULT.render(markup, status=status)
    return renderer(markup, status=status)


_DEFAULT = Renderer()

"""Mikrob application — page index + Chirp integration.

``create_app`` builds one Chirp app from a site directory: static files,
the rendering middleware, and one route per page.  ``mikrob`` adds watch
mode on top, and ``dev`` / ``serve`` run the result under Pounce.
"""

import asyncio
import time
from pathlib import Path
from typing import TYPE_CHECKING

from mikrob.config import MikrobConfig
from mikrob.config_loader import load_config

if TYPE_CHECKING:
    from chirp import App

    from mikrob._types import MarkdownRenderer, StaticServer
    from mikrob.routing.compiler import PageRouter
    from mikrob.watcher import LiveApp


def static_files(root: Path) -> object:
    """Default static-serving capability: serve *root* at the site root.

    Unknown paths fall through to the page routes.

    """
    from chirp.middleware import StaticFiles

    return StaticFiles(directory=root, prefix="/", cache_control="no-cache")


def _create_chirp_app(config: MikrobConfig) -> App:
    """Create a Chirp App configured for the Mikrob site.

    The views directory doubles as the template directory, so views may
    return ``Template("post.html", ...)``.  Chirp's htmx helper snippets are
    disabled: pages are served exactly as their views render them.

    """
    from chirp import App, AppConfig

    app_config = AppConfig(
        template_dir=config.views_path,
        static_dir=None,
        debug=config.debug,
        host=config.host,
        port=config.port,
        workers=config.workers,
        safe_target=False,
        sse_lifecycle=False,
    )
    return App(config=app_config)


def _mount_middleware(app: App, config: MikrobConfig, serve_static: StaticServer | None) -> None:
    """Attach static serving (first, when supplied) and the renderer."""
    from mikrob.rendering import Renderer

    if serve_static is not None:
        app.add_middleware(serve_static(root=config.static_path))

    app.add_middleware(Renderer())


async def build_app(
    config: MikrobConfig,
    *,
    serve_static: StaticServer | None = None,
    markdown: MarkdownRenderer | None = None,
) -> tuple[App, PageRouter]:
    """Build a Chirp app and the page router that populated it."""
    from mikrob.pages.loader import load_pages
    from mikrob.pages.views import ViewLoader
    from mikrob.routing.compiler import create_pages

    app = _create_chirp_app(config)
    _mount_middleware(app, config, serve_static)

    pages = await load_pages(config.pages_path, config.views_path, markdown=markdown)
    router = create_pages(app, pages, views=ViewLoader(config.views_path))
    return app, router


async def create_app(
    config: MikrobConfig | None = None,
    *,
    serve_static: StaticServer | None = None,
    markdown: MarkdownRenderer | None = None,
    **kwargs: object,
) -> App:
    """Build a Chirp app serving the pages under ``config.pages_path``.

    Args:
        config: Site configuration; built from *kwargs* when omitted.
        serve_static: Static-serving capability, called as
            ``serve_static(root=static_path)`` and mounted first.
        markdown: Markdown renderer for ``.md`` pages (default: patitas).
        **kwargs: MikrobConfig fields, when *config* is omitted.

    """
    config = config or MikrobConfig(**kwargs)  # type: ignore[arg-type]
    app, _router = await build_app(config, serve_static=serve_static, markdown=markdown)
    return app


async def mikrob(
    config: MikrobConfig | None = None,
    *,
    serve_static: StaticServer | None = None,
    markdown: MarkdownRenderer | None = None,
    **kwargs: object,
) -> App | LiveApp:
    """Build the site; with ``watch`` enabled, return a rebuilding LiveApp.

    The LiveApp starts watching ``config.root`` when the server sends the
    ASGI lifespan startup event.

    """
    from mikrob.watcher import LiveApp

    config = config or MikrobConfig(**kwargs)  # type: ignore[arg-type]

    async def build() -> App:
        return await create_app(config, serve_static=serve_static, markdown=markdown)

    app = await build()
    if not config.watch:
        return app
    return LiveApp(app, build, config)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def _run(config: MikrobConfig, mode: str) -> None:
    """Build, print the banner, and serve under Pounce."""
    from pounce.config import ServerConfig
    from pounce.server import Server

    from mikrob.banner import print_banner
    from mikrob.watcher import LiveApp

    t0 = time.perf_counter()
    app, router = asyncio.run(build_app(config, serve_static=static_files))
    load_ms = (time.perf_counter() - t0) * 1000

    served: object = app
    if config.watch:

        async def build() -> App:
            rebuilt, _router = await build_app(config, serve_static=static_files)
            return rebuilt

        served = LiveApp(app, build, config)

    print_banner(config, router.page_count, mode=mode, load_ms=load_ms)

    server_config = ServerConfig(
        host=config.host,
        port=config.port,
        workers=1 if config.watch else config.workers,
    )
    server = Server(server_config, served)
    server.run()


def dev(root: str | Path = ".", **kwargs: object) -> None:
    """Start a development server that rebuilds on every change.

    Args:
        root: Path to the site root directory.
        **kwargs: Override MikrobConfig fields.

    """
    kwargs.setdefault("watch", True)
    kwargs.setdefault("debug", True)
    _run(load_config(Path(root), **kwargs), mode="dev")


def serve(root: str | Path = ".", **kwargs: object) -> None:
    """Run the site as a production server.

    Args:
        root: Path to the site root directory.
        **kwargs: Override MikrobConfig fields.

    """
    _run(load_config(Path(root), **kwargs), mode="serve")


def list_routes(root: str | Path = ".", **kwargs: object) -> PageRouter:
    """Build the site without serving it and return its page router."""
    config = load_config(Path(root), **kwargs)
    _app, router = asyncio.run(build_app(config))
    return router

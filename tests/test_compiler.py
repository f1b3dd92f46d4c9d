"""Tests for mikrob.routing.compiler — pages to Chirp routes."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from chirp import App, AppConfig
from chirp.http.response import Redirect, Response

from mikrob.pages.records import PageData
from mikrob.pages.views import ViewLoader
from mikrob.routing.compiler import (
    CompiledRoute,
    PageRouter,
    create_page,
    create_pages,
    route_pattern,
    route_shape,
)

from .conftest import write_file


@pytest.fixture
def views_dir(tmp_path: Path) -> Path:
    d = tmp_path / "views"
    write_file(d, "page.py", "def view(request, pages, page):\n    return f\"<p>{page['title']}</p>\"\n")
    return d


def _page(tmp_path: Path, name: str, path: str, **kwargs: object) -> PageData:
    return PageData(file=tmp_path / "pages" / name, path=path, **kwargs)  # type: ignore[arg-type]


def _app(tmp_path: Path) -> App:
    return App(config=AppConfig(template_dir=tmp_path, static_dir=None, safe_target=False, sse_lifecycle=False))


class TestRoutePattern:
    """route_pattern — page paths to Chirp route patterns."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/", "/"),
            ("/about", "/about"),
            ("/*", "/{path:path}"),
            ("/docs/*", "/docs/{path:path}"),
            ("/docs/*/ignored", "/docs/{path:path}"),
            ("/posts/:slug", "/posts/{slug}"),
            ("/posts/{slug}", "/posts/{slug}"),
            ("/files/{rest:path}", "/files/{rest:path}"),
            ("/a/:", "/a/:"),
        ],
    )
    def test_translation(self, path: str, expected: str) -> None:
        assert route_pattern(path) == expected


class TestRouteShape:
    """route_shape — the router position a pattern occupies."""

    @pytest.mark.parametrize(
        ("pattern", "expected"),
        [
            ("/", ()),
            ("/about", ("about",)),
            ("/blog/{slug}", ("blog", "{}")),
            ("/blog/{id:int}", ("blog", "{}")),
            ("/{path:path}", ("*",)),
            ("/docs/{rest:path}", ("docs", "*")),
            ("/u/{id}/posts", ("u", "{}", "posts")),
        ],
    )
    def test_shape(self, pattern: str, expected: tuple[str, ...]) -> None:
        assert route_shape(pattern) == expected

    def test_parameter_names_do_not_matter(self) -> None:
        assert route_shape(route_pattern("/blog/:slug")) == route_shape(route_pattern("/blog/:id"))

    def test_catch_all_names_do_not_matter(self) -> None:
        assert route_shape(route_pattern("/docs/*")) == route_shape("/docs/{rest:path}")


class TestCreatePage:
    """create_page — one page to one handler, or None."""

    def test_redirect_skips_view_resolution(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        page = _page(tmp_path, "old.json", "/old", redirect="/new", view=tmp_path / "missing.py")
        with caplog.at_level(logging.WARNING, logger="mikrob"):
            handler = create_page(page, [page])

        assert handler is not None
        assert caplog.records == []

    @pytest.mark.asyncio
    async def test_redirect_handler_default_status(self, tmp_path: Path) -> None:
        page = _page(tmp_path, "old.json", "/old", redirect="/new")
        handler = create_page(page, [page])

        assert handler is not None
        result = await handler(request=None)
        assert result == Redirect("/new", status=302)

    @pytest.mark.asyncio
    async def test_redirect_handler_custom_status(self, tmp_path: Path) -> None:
        page = _page(tmp_path, "old.json", "/old", redirect="/new", status=301)
        handler = create_page(page, [page])

        assert handler is not None
        result = await handler(request=None)
        assert result.status == 301

    def test_missing_view_returns_none(self, tmp_path: Path) -> None:
        page = _page(tmp_path, "a.json", "/a", view=tmp_path / "missing.py")
        assert create_page(page, [page]) is None

    def test_no_view_returns_none(self, tmp_path: Path) -> None:
        page = _page(tmp_path, "a.json", "/a")
        assert create_page(page, [page]) is None

    @pytest.mark.asyncio
    async def test_view_output_rendered(self, tmp_path: Path, views_dir: Path) -> None:
        page = _page(tmp_path, "a.json", "/a", view=views_dir / "page.py", data={"title": "A"})
        handler = create_page(page, [page], views=ViewLoader(views_dir))

        assert handler is not None
        response = await handler(request=None)
        assert isinstance(response, Response)
        assert response.status == 200
        assert response.text == "<!DOCTYPE html><p>A</p>"

    @pytest.mark.asyncio
    async def test_view_receives_pages_and_page(self, tmp_path: Path) -> None:
        views = tmp_path / "views"
        write_file(
            views,
            "count.py",
            "def view(request, pages, page):\n    return f'{len(pages)} {page.path}'\n",
        )
        page = _page(tmp_path, "a.json", "/a", view=views / "count.py")
        other = _page(tmp_path, "b.json", "/b")
        handler = create_page(page, [page, other])

        assert handler is not None
        response = await handler(request=None)
        assert response.text.endswith("2 /a")

    @pytest.mark.asyncio
    async def test_none_renders_empty_document(self, tmp_path: Path) -> None:
        views = tmp_path / "views"
        write_file(views, "nothing.py", "def view(request, pages, page):\n    return None\n")
        page = _page(tmp_path, "a.json", "/a", view=views / "nothing.py", status=202)
        handler = create_page(page, [page])

        assert handler is not None
        response = await handler(request=None)
        assert response.status == 202
        assert response.text == "<!DOCTYPE html>"

    @pytest.mark.asyncio
    async def test_raw_response_returned_verbatim(self, tmp_path: Path) -> None:
        views = tmp_path / "views"
        write_file(
            views,
            "raw.py",
            "from chirp import Response\n"
            "def view(request, pages, page):\n"
            "    return Response(body='{}', status=418, content_type='application/json')\n",
        )
        page = _page(tmp_path, "a.json", "/a", view=views / "raw.py", status=200)
        handler = create_page(page, [page])

        assert handler is not None
        response = await handler(request=None)
        assert response.status == 418
        assert response.body == "{}"

    @pytest.mark.asyncio
    async def test_other_values_get_status_tuple(self, tmp_path: Path) -> None:
        views = tmp_path / "views"
        write_file(views, "data.py", "def view(request, pages, page):\n    return {'ok': True}\n")
        page = _page(tmp_path, "a.json", "/a", view=views / "data.py", status=201)
        handler = create_page(page, [page])

        assert handler is not None
        assert await handler(request=None) == ({"ok": True}, 201)

    @pytest.mark.asyncio
    async def test_view_errors_propagate(self, tmp_path: Path) -> None:
        views = tmp_path / "views"
        write_file(views, "boom.py", "def view(request, pages, page):\n    raise ValueError('boom')\n")
        page = _page(tmp_path, "a.json", "/a", view=views / "boom.py")
        handler = create_page(page, [page])

        assert handler is not None
        with pytest.raises(ValueError, match="boom"):
            await handler(request=None)


class TestPageRouter:
    """PageRouter — registration order, skips and duplicates."""

    def test_registers_in_index_order(self, tmp_path: Path, views_dir: Path) -> None:
        pages = [
            _page(tmp_path, "blog/post.json", "/blog/post", view=views_dir / "page.py"),
            _page(tmp_path, "about.json", "/about", view=views_dir / "page.py"),
            _page(tmp_path, "old.json", "/old", redirect="/about"),
        ]
        router = create_pages(_app(tmp_path), pages, views=ViewLoader(views_dir))

        assert [route.pattern for route in router.routes] == ["/blog/post", "/about", "/old"]
        assert router.page_count == 3
        assert all(isinstance(route, CompiledRoute) for route in router.routes)

    def test_pages_without_view_skipped(self, tmp_path: Path, views_dir: Path) -> None:
        pages = [
            _page(tmp_path, "orphan.json", "/orphan", view=views_dir / "missing.py"),
            _page(tmp_path, "about.json", "/about", view=views_dir / "page.py"),
        ]
        router = create_pages(_app(tmp_path), pages, views=ViewLoader(views_dir))

        assert [route.page.path for route in router.routes] == ["/about"]

    def test_duplicate_pattern_first_wins(
        self, tmp_path: Path, views_dir: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        first = _page(tmp_path, "a.json", "/same", view=views_dir / "page.py")
        second = _page(tmp_path, "b.json", "/same", view=views_dir / "page.py")

        with caplog.at_level(logging.WARNING, logger="mikrob"):
            router = PageRouter(_app(tmp_path), [first, second], views=ViewLoader(views_dir))
            router.register_pages()

        assert [route.page for route in router.routes] == [first]
        assert "already registered" in caplog.text
        assert "b.json" in caplog.text

    @pytest.mark.parametrize(
        ("first_path", "second_path"),
        [
            ("/blog/:slug", "/blog/:id"),
            ("/docs/*", "/docs/{rest:path}"),
            ("/u/{id:int}", "/u/{slug}"),
        ],
    )
    def test_same_position_first_wins(
        self,
        tmp_path: Path,
        views_dir: Path,
        caplog: pytest.LogCaptureFixture,
        first_path: str,
        second_path: str,
    ) -> None:
        first = _page(tmp_path, "blog/deep/a.json", first_path, view=views_dir / "page.py")
        second = _page(tmp_path, "b.json", second_path, view=views_dir / "page.py")

        with caplog.at_level(logging.WARNING, logger="mikrob"):
            router = create_pages(_app(tmp_path), [first, second], views=ViewLoader(views_dir))

        assert router.routes
        assert all(route.page is first for route in router.routes)
        assert "already registered" in caplog.text
        assert "b.json" in caplog.text

    def test_conflicting_parameter_skipped(
        self, tmp_path: Path, views_dir: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        first = _page(tmp_path, "a.json", "/u/{id:int}/posts", view=views_dir / "page.py")
        second = _page(tmp_path, "b.json", "/u/{slug}/about", view=views_dir / "page.py")
        third = _page(tmp_path, "c.json", "/u/{id:int}/about", view=views_dir / "page.py")

        with caplog.at_level(logging.WARNING, logger="mikrob"):
            router = create_pages(_app(tmp_path), [first, second, third], views=ViewLoader(views_dir))

        assert [route.page for route in router.routes] == [first, third]
        assert "{id:int}" in caplog.text
        assert "b.json" in caplog.text

    def test_catch_all_also_serves_prefix(self, tmp_path: Path, views_dir: Path) -> None:
        pages = [
            _page(tmp_path, "docs.json", "/docs/*", view=views_dir / "page.py"),
            _page(tmp_path, "all.json", "/*", view=views_dir / "page.py"),
        ]
        router = create_pages(_app(tmp_path), pages, views=ViewLoader(views_dir))

        assert [(route.pattern, route.page) for route in router.routes] == [
            ("/docs/{path:path}", pages[0]),
            ("/{path:path}", pages[1]),
            ("/docs", pages[0]),
            ("/", pages[1]),
        ]
        assert router.page_count == 2

    def test_claimed_prefix_kept_by_its_page(self, tmp_path: Path, views_dir: Path) -> None:
        pages = [
            _page(tmp_path, "all.json", "/*", view=views_dir / "page.py"),
            _page(tmp_path, "index.json", "/", view=views_dir / "page.py"),
        ]
        router = create_pages(_app(tmp_path), pages, views=ViewLoader(views_dir))

        assert [(route.pattern, route.page) for route in router.routes] == [
            ("/{path:path}", pages[0]),
            ("/", pages[1]),
        ]

    def test_failed_page_does_not_claim_pattern(self, tmp_path: Path, views_dir: Path) -> None:
        broken = _page(tmp_path, "a.json", "/same", view=views_dir / "missing.py")
        working = _page(tmp_path, "b.json", "/same", view=views_dir / "page.py")
        router = create_pages(_app(tmp_path), [broken, working], views=ViewLoader(views_dir))

        assert [route.page for route in router.routes] == [working]

    def test_handlers_named_uniquely(self, tmp_path: Path, views_dir: Path) -> None:
        pages = [
            _page(tmp_path, "a.json", "/a", view=views_dir / "page.py"),
            _page(tmp_path, "b.json", "/b", view=views_dir / "page.py"),
        ]
        router = create_pages(_app(tmp_path), pages, views=ViewLoader(views_dir))

        assert [route.handler.__name__ for route in router.routes] == ["page_0", "page_1"]

    def test_empty_index(self, tmp_path: Path) -> None:
        router = create_pages(_app(tmp_path), [])
        assert router.routes == ()
        assert router.page_count == 0

"""Shared test fixtures for mikrob."""

from __future__ import annotations

from pathlib import Path

import pytest


def write_file(root: Path, name: str, content: str) -> Path:
    """Write *content* to ``root/name``, creating parent directories."""
    p = root / name
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content, encoding="utf-8")
    return p


def fake_markdown(source: str) -> str:
    """Stand-in Markdown renderer: keeps tests independent of patitas output."""
    return f"<md>{source.strip()}</md>"


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """Create a small site with pages/, views/ and static/ directories.

    Pages:
        index.json            -> /         (view: page.py)
        about.yaml            -> /about    (view: page.py, status 201)
        blog/01-uno.md        -> /blog/uno (explicit path, view: post.py)
        old.json              -> /old      (redirect to /about, 301)
        test.json             -> /test     (view: page.py)
        broken.json           -> invalid JSON, skipped
        orphan.json           -> missing view, skipped

    """
    pages = tmp_path / "pages"
    views = tmp_path / "views"

    write_file(pages, "index.json", '{"view": "page.py", "title": "Home"}')
    write_file(pages, "about.yaml", "view: page.py\nstatus: 201\ntitle: About\n")
    write_file(
        pages,
        "blog/01-uno.md",
        "---\npath: /blog/uno\nview: post.py\ntitle: Uno\n---\n# Uno\n",
    )
    write_file(pages, "old.json", '{"redirect": "/about", "status": 301}')
    write_file(pages, "test.json", '{"view": "page.py", "title": "Test"}')
    write_file(pages, "broken.json", '{"view": ')
    write_file(pages, "orphan.json", '{"view": "missing.py"}')

    write_file(
        views,
        "page.py",
        "def view(request, pages, page):\n"
        "    return f\"<h1>{page['title']}</h1>\"\n",
    )
    write_file(
        views,
        "post.py",
        "async def view(request, pages, page):\n"
        "    return f\"<article>{page['body']}</article>\"\n",
    )

    write_file(tmp_path / "static", "style.css", "body { margin: 0; }\n")

    return tmp_path

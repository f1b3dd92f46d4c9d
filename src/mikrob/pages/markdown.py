"""Markdown page documents: front matter plus a Markdown body.

A Markdown page starts with a ``---`` delimited block of structured data
(YAML, which also accepts JSON) followed by the body::

    ---
    title: Hello
    view: post.py
    ---
    # Hello

The front matter becomes the page descriptor and the rendered body is stored
under ``body``.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

import yaml

from mikrob._errors import PageError
from mikrob.diagnostics import MARKDOWN_NOT_CORRECT_FORMAT

if TYPE_CHECKING:
    from mikrob._types import MarkdownRenderer

_FRONT_MATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)(.*)\Z",
    re.DOTALL,
)

# Patitas plugins enabled for page bodies
DEFAULT_PLUGINS: tuple[str, ...] = ("table",)


def create_markdown_renderer(plugins: tuple[str, ...] = DEFAULT_PLUGINS) -> MarkdownRenderer:
    """Return a ``str -> str`` Markdown renderer backed by patitas."""
    from patitas import Markdown

    md = Markdown(plugins=list(plugins))

    def render(source: str) -> str:
        if not source:
            return ""
        return md(source)

    return render


def split_front_matter(text: str) -> tuple[str, str] | None:
    """Split a document into ``(front_matter, body)``, or *None* if it has none."""
    match = _FRONT_MATTER_RE.match(text.removeprefix("\ufeff"))
    if match is None:
        return None
    return match.group(1) or "", match.group(2)


def parse_markdown_page(text: str, render: MarkdownRenderer) -> dict[str, Any]:
    """Parse a Markdown page document into a descriptor with a rendered ``body``.

    Raises:
        PageError: If the front matter block is missing or not a mapping.
        yaml.YAMLError: If the front matter is not valid YAML.

    """
    parts = split_front_matter(text)
    if parts is None:
        raise PageError(MARKDOWN_NOT_CORRECT_FORMAT)

    front_matter, body = parts
    data = yaml.safe_load(front_matter)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        msg = f"Front matter must be a mapping, got {type(data).__name__}."
        raise PageError(msg)

    return {**data, "body": render(body)}

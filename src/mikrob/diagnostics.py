"""Diagnostics channel for recoverable page and view problems.

Broken pages never abort a build. They are reported here, tagged with the
offending file, and left out of the route table.
"""

import logging
import traceback
from pathlib import Path

logger = logging.getLogger("mikrob")

NO_VIEW_DEFINED = "No view defined for this page."
VIEW_NOT_FOUND_OR_NOT_SUPPORTED = "View file not found or not supported."
NO_DEFAULT_EXPORT = "View module has no callable 'view' export."
NO_PAGE_EXPORT = "Page module has no 'page' export."
MARKDOWN_NOT_CORRECT_FORMAT = (
    "Markdown page must start with a '---' delimited front matter block."
)
DUPLICATE_ROUTE = "Route {path!r} is already registered by {other}; page skipped."
PARAM_CONFLICT = (
    "Route {path!r} reuses a parameter position that {other} declares as {param}; page skipped."
)


def format_error(error: object) -> str:
    """Render *error* as a traceback for exceptions, plain text otherwise."""
    if isinstance(error, BaseException):
        return "".join(traceback.format_exception(error)).rstrip()
    return f"{error}"


def show_warn(file: str | Path | None, error: object) -> None:
    """Log a warning for *file*.

    Always returns *None* so resolvers can ``return show_warn(...)``.
    """
    logger.warning("[%s] %s", file, format_error(error))

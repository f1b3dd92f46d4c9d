"""Page records: the in-memory form of one page descriptor."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

# Descriptor keys with a meaning of their own; everything else is view data.
RESERVED_KEYS: frozenset[str] = frozenset({"path", "status", "view", "redirect", "file"})


def _empty_data() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class PageData:
    """A loaded page, ready for view resolution and routing.

    Attributes:
        file: Absolute path of the descriptor file.
        path: Normalized route path, always starting with ``/``.
        view: Absolute path of the view module, if the page names one.
        status: HTTP status for responses (redirect status for redirects).
        redirect: Redirect destination. Redirect pages never resolve a view.
        data: Every other descriptor key, passed to the view untouched.

    Supports ``page["title"]`` and ``page.get("title")`` over both the
    known fields and ``data``.

    """

    file: Path
    path: str
    view: Path | None = None
    status: int | None = None
    redirect: str | None = None
    data: Mapping[str, Any] = field(default_factory=_empty_data, hash=False)

    def __post_init__(self) -> None:
        if not isinstance(self.data, MappingProxyType):
            object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    def __getitem__(self, key: str) -> Any:
        if key in RESERVED_KEYS:
            return getattr(self, key)
        return self.data[key]

    def __contains__(self, key: object) -> bool:
        if key in RESERVED_KEYS:
            return getattr(self, key) is not None  # type: ignore[arg-type]
        return key in self.data

    def get(self, key: str, default: Any = None) -> Any:
        """Return a known field or data value, or *default*."""
        try:
            return self[key]
        except KeyError:
            return default

    def keys(self) -> Iterator[str]:
        """Known fields that are set, followed by the data keys."""
        for key in ("file", "path", "view", "status", "redirect"):
            if getattr(self, key) is not None:
                yield key
        yield from self.data

    def as_dict(self) -> dict[str, Any]:
        """Flatten into a plain dict, omitting unset known fields."""
        return {key: self[key] for key in self.keys()}

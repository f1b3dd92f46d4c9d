"""Mikrob configuration.

MikrobConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class MikrobConfig:
    """Configuration for a Mikrob application.

    Attributes:
        root: Working directory the site directories are resolved against.
              Always resolved to an absolute path on construction.
        host: Bind address for dev/serve modes.
        port: Bind port for dev/serve modes.
        workers: Number of Pounce workers (0 = auto-detect).
        pages_dir: Directory containing page descriptors.
        views_dir: Directory containing view modules (and view templates).
        static_dir: Directory containing static assets.
        watch: Rebuild the application when anything under ``root`` changes.
        debug: Run the Chirp app in debug mode.

    """

    root: Path = field(default_factory=Path.cwd)
    host: str = "127.0.0.1"
    port: int = 3000
    workers: int = 0
    pages_dir: str = "pages"
    views_dir: str = "views"
    static_dir: str = "static"
    watch: bool = False
    debug: bool = False

    def __post_init__(self) -> None:
        # watchfiles reports absolute paths; keep root comparable with them.
        root = Path(self.root)
        if not root.is_absolute():
            root = root.resolve()
        object.__setattr__(self, "root", root)

    @property
    def pages_path(self) -> Path:
        """Absolute path to the pages directory."""
        return (self.root / self.pages_dir).resolve()

    @property
    def views_path(self) -> Path:
        """Absolute path to the views directory."""
        return (self.root / self.views_dir).resolve()

    @property
    def static_path(self) -> Path:
        """Absolute path to the static assets directory."""
        return (self.root / self.static_dir).resolve()

"""Mikrob — a file-based page server on Chirp.

Every file under ``pages/`` describes one page: its URL, an optional status
code, and either a redirect or a view under ``views/`` that renders it.

Quick start::

    import mikrob

    mikrob.dev("my-site/")

Building the app yourself::

    app = await mikrob.create_app(mikrob.MikrobConfig(root=Path("my-site")))

Part of the Bengal ecosystem:

    pounce      ASGI server       (serves apps)
    chirp       Web framework     (serves HTML)
    patitas     Markdown parser   (parses content)

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0-dev"
__all__ = [
    "MikrobConfig",
    "__version__",
    "create_app",
    "dev",
    "mikrob",
    "serve",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import mikrob`` fast while providing a clean top-level API.
    """
    if name == "MikrobConfig":
        from mikrob.config import MikrobConfig

        return MikrobConfig

    if name in ("create_app", "dev", "mikrob", "serve"):
        from mikrob import app

        return getattr(app, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)

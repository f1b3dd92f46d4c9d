"""Mikrob error hierarchy.

All mikrob-specific errors inherit from MikrobError for easy catching.
"""


class MikrobError(Exception):
    """Base error for all mikrob operations."""


class ConfigError(MikrobError):
    """Invalid or missing configuration."""


class PageError(MikrobError):
    """A page descriptor that parsed but cannot become a page record."""

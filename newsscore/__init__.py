"""NEWS early-warning score service."""

__version__ = "0.1.0"

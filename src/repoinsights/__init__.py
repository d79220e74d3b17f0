"""Repository health insights from GitHub metadata."""

__version__ = "0.1.0"

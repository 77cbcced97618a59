"""Resolve the license of Go module dependencies."""

__version__ = "1.0.0"

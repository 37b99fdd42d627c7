"""Command-line interface for gdoc-mirror."""

from gdoc_mirror.cli.main import main

__all__ = ["main"]

"""Command-line interface tools."""

from .check import run_checks

__all__ = [
    "run_checks",
]

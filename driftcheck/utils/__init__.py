"""Utility functions."""

from .logging import setup_logging, get_logger
from .progress import MultiProgress
from .output import print_issues, format_issue

__all__ = [
    "setup_logging",
    "get_logger",
    "MultiProgress",
    "print_issues",
    "format_issue",
]

"""CLI commands."""

from .init_cmd import init_repository

__all__ = ["init_repository"]

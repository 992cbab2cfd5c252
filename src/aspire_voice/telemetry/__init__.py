"""Logging setup for the CLI and HTTP service."""

from .logging import configure_logging

__all__ = ["configure_logging"]

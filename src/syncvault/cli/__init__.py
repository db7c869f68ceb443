"""Command line interface for syncvault."""

from .dispatcher import main

__all__ = ["main"]

"""Migration support for the test application."""

from .migrator import Migrator

__all__ = ["Migrator"]

"""Core container, bootstrappers and error handling."""

from .application import Application
from .error_handler import ExceptionHandler, handle_error
from .exceptions import TestbenchError

__all__ = ["Application", "ExceptionHandler", "TestbenchError", "handle_error"]

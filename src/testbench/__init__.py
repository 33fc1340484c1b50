"""testbench - bootstrap shim running a package's test application console."""

__version__ = "0.1.0"

from .config import TestbenchConfig, load_config
from .console import Commander, ConsoleKernel
from .core import Application
from .providers import ServiceProvider

__all__ = [
    "Application",
    "Commander",
    "ConsoleKernel",
    "ServiceProvider",
    "TestbenchConfig",
    "load_config",
]

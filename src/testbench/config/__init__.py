"""Configuration for the testbench shim."""

from .env_loader import DEFAULT_ENVIRONMENT, EnvLoader
from .loader import load_config
from .path_manager import PathManager
from .schemas import TestbenchConfig

__all__ = [
    "DEFAULT_ENVIRONMENT",
    "EnvLoader",
    "PathManager",
    "TestbenchConfig",
    "load_config",
]

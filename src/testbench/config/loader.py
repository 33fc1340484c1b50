"""Loading of the `testbench.yaml` configuration file."""

from pathlib import Path
from typing import Any

import yaml

from testbench.config.schemas import TestbenchConfig
from testbench.core.exceptions import ConfigError
from testbench.utils.logging import get_logger

logger = get_logger("config.loader")

CONFIG_FILES = ("testbench.yaml", "testbench.yaml.dist")


def find_config_file(working_path: str | Path) -> Path | None:
    """Return the first existing config file in `working_path`, if any."""
    for filename in CONFIG_FILES:
        candidate = Path(working_path) / filename
        if candidate.is_file():
            return candidate
    return None


def _load_yaml_file(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def load_config(working_path: str | Path) -> TestbenchConfig:
    """Load the testbench configuration for a working directory.

    `testbench.yaml` wins over `testbench.yaml.dist`; without either file
    the defaults are used.

    Raises:
        ConfigError: If the file cannot be parsed or fails validation
    """
    path = find_config_file(working_path)
    if path is None:
        logger.debug("No testbench config in %s, using defaults", working_path)
        return TestbenchConfig()

    logger.info("Loading testbench config from %s", path)
    return TestbenchConfig.from_dict(_load_yaml_file(path))

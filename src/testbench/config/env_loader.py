"""Environment variable loading for the test application."""

import io
import os
from collections.abc import Sequence
from pathlib import Path

from dotenv import dotenv_values

from testbench.core.exceptions import ConfigError
from testbench.utils.logging import get_logger

logger = get_logger("config.env_loader")

# Used when the base path has no .env file and the config lists no `env` lines
DEFAULT_ENVIRONMENT: tuple[str, ...] = (
    'APP_ENV="testing"',
    'APP_KEY="AckfSECXIvnK5r28GVIWUAxmbBSjTsmF"',
    'DB_CONNECTION="testing"',
)


class EnvLoader:
    """Loads environment variables from `<base>/.env` or from config lines."""

    def __init__(
        self,
        base_path: str | Path,
        env_lines: Sequence[str] | None = None,
        *,
        override: bool = False,
    ):
        """Initialize the environment loader.

        Args:
            base_path: Directory checked for a `.env` file
            env_lines: KEY=value lines used when no `.env` file exists
            override: Whether to replace variables already set in the process
        """
        self.base_path = Path(base_path)
        self.env_lines = list(env_lines or [])
        self.override = override

    @property
    def env_file(self) -> Path:
        return self.base_path / ".env"

    def has_env_file(self) -> bool:
        return self.env_file.is_file()

    def lines(self) -> list[str]:
        """Config lines to parse, falling back to the default set when empty."""
        return self.env_lines or list(DEFAULT_ENVIRONMENT)

    def read(self) -> dict[str, str]:
        """Parse variables without touching the process environment.

        Raises:
            ConfigError: If the `.env` file exists but cannot be read
        """
        if self.has_env_file():
            try:
                values = dotenv_values(self.env_file)
            except OSError as e:
                raise ConfigError(
                    f"Failed to load .env file {self.env_file}: {e}"
                ) from e
            logger.debug("Read environment from %s", self.env_file)
        else:
            values = dotenv_values(stream=io.StringIO("\n".join(self.lines())))
            logger.debug("Read environment from %d config lines", len(self.lines()))

        # Keys without a value ("FOO" alone on a line) come back as None
        return {key: value for key, value in values.items() if value is not None}

    def load(self) -> dict[str, str]:
        """Apply variables to `os.environ` and return the ones that were set."""
        applied: dict[str, str] = {}
        for key, value in self.read().items():
            if not self.override and key in os.environ:
                continue
            os.environ[key] = value
            applied[key] = value

        if applied:
            logger.info("Loaded %d environment variables", len(applied))
        return applied

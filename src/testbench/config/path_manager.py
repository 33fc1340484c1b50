"""Path resolution for the test application."""

import os
from pathlib import Path

from testbench.utils.logging import get_logger

logger = get_logger("config.path_manager")

# Relative-path token in config values, replaced by the working path
RELATIVE_TOKEN = "./"

VENDOR_DIRECTORY = "vendor"


class PathManager:
    """Resolves the base path and config-relative paths for one working path."""

    def __init__(self, working_path: str | Path | None = None):
        """Initialize the path manager.

        Args:
            working_path: Directory of the package under test (defaults to cwd)
        """
        self._working_path = Path(working_path) if working_path else Path.cwd()

    @property
    def working_path(self) -> Path:
        return self._working_path

    @staticmethod
    def default_base_path() -> Path:
        """The application skeleton shipped inside the package."""
        return Path(__file__).resolve().parent.parent / "skeleton"

    def substitute(self, value: str) -> str:
        """Replace every `./` token in `value` with the working path."""
        return value.replace(RELATIVE_TOKEN, f"{self._working_path}/")

    def resolve_base_path(self, override: str | None = None) -> str:
        """Resolve the application base path.

        Args:
            override: Configured base path (the `laravel` key), if any

        Returns:
            `override` with the relative token substituted, else the default
            application path
        """
        if override is not None:
            return self.substitute(override)
        return str(self.default_base_path())

    def resolve_path(self, path: str | Path, *, base_dir: str | Path) -> Path:
        """Resolve a config path; relative results are anchored at `base_dir`."""
        resolved = Path(self.substitute(os.fspath(path)))
        if resolved.is_absolute():
            return resolved
        return Path(base_dir) / resolved

    def link_vendor(self, base_path: str | Path) -> bool:
        """Symlink `<working>/vendor` into `<base>/vendor`.

        Nothing happens when the source is missing or the target already exists.

        Returns:
            True if a link was created
        """
        source = self._working_path / VENDOR_DIRECTORY
        target = Path(base_path) / VENDOR_DIRECTORY

        if not source.is_dir() or target.exists() or target.is_symlink():
            return False
        if source.resolve() == target.resolve():
            return False

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.symlink_to(source, target_is_directory=True)
        except OSError as exc:
            logger.warning("Failed to link %s to %s: %s", source, target, exc)
            return False

        logger.debug("Linked %s to %s", source, target)
        return True

"""Bootstrappers run against the application while it is being built."""

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from testbench.config.env_loader import EnvLoader
from testbench.config.path_manager import PathManager
from testbench.core.application import Application
from testbench.utils.logging import get_logger

logger = get_logger("core.bootstrap")


class LoadEnvironmentVariables:
    """Load `<base>/.env` when present, otherwise the configured `env` lines."""

    def __init__(self, base_path: str | Path, env: Sequence[str] | None = None):
        self.base_path = Path(base_path)
        self.env = list(env or [])

    def bootstrap(self, app: Application) -> None:
        loader = EnvLoader(self.base_path, self.env)
        source = str(loader.env_file) if loader.has_env_file() else "config"
        loaded = loader.load()
        app.instance("env.loaded", loaded)
        logger.debug("Environment loaded from %s", source)


class LoadMigrationsFromArray:
    """Register migration paths on the application's migrator.

    Each entry has `./` replaced by the working path; remaining relative
    paths are resolved against the application base path.
    """

    def __init__(
        self, migrations: Sequence[str], working_path: str | Path | None = None
    ):
        self.migrations = list(migrations)
        self.working_path = working_path

    def bootstrap(self, app: Application) -> None:
        paths = PathManager(self.working_path or app.working_path)
        migrator = app.make("migrator")
        for migration in self.migrations:
            migrator.path(paths.resolve_path(migration, base_dir=app.base_path()))
        logger.debug("Registered %d migration paths", len(self.migrations))


class RegisterProviders:
    """Register a list of providers (instances, classes or dotted paths)."""

    def __init__(self, providers: Iterable[Any]):
        self.providers = list(providers)

    def bootstrap(self, app: Application) -> None:
        for provider in self.providers:
            app.register(provider)

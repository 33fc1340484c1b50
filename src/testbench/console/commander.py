"""Bootstrap shim running the test application's console kernel."""

import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any, NoReturn, TextIO

from testbench.config.path_manager import PathManager
from testbench.config.schemas import TestbenchConfig
from testbench.core.application import Application
from testbench.core.bootstrap import (
    LoadEnvironmentVariables,
    LoadMigrationsFromArray,
    RegisterProviders,
)
from testbench.core.error_handler import ExceptionHandler
from testbench.core.exceptions import ConsoleError, ContainerError
from testbench.core.protocols import IAppContainer, IConsoleKernel
from testbench.providers.discovery import PackageManifest
from testbench.providers.testbench_provider import TestbenchServiceProvider
from testbench.utils.logging import get_logger

logger = get_logger("console.commander")


class Commander:
    """Builds the test application for a package and runs a console command.

    Example:
        Commander(load_config(cwd), cwd).handle()
    """

    def __init__(
        self,
        config: TestbenchConfig | dict[str, Any] | None = None,
        working_path: str | Path | None = None,
    ) -> None:
        """Initialize the commander.

        Args:
            config: Parsed configuration or a raw mapping with the same keys
            working_path: Directory of the package under test (defaults to cwd)

        Raises:
            ConfigError: If a raw mapping fails validation
        """
        if not isinstance(config, TestbenchConfig):
            config = TestbenchConfig.from_dict(config)
        self.config = config
        self.paths = PathManager(working_path)
        self.base_path: str | None = None
        self._app: IAppContainer | None = None

    @property
    def working_path(self) -> Path:
        return self.paths.working_path

    def get_base_path(self) -> str:
        """Resolve the application base path and remember it on the commander."""
        self.base_path = self.paths.resolve_base_path(self.config.laravel)
        return self.base_path

    def get_package_providers(self, app: IAppContainer) -> list[Any]:
        """Providers registered after the internal and discovered ones."""
        return list(self.config.providers)

    def define_environment(self, app: IAppContainer) -> None:
        """Hook for subclasses to adjust the application before it boots."""

    def resolve_application(self) -> IAppContainer:
        """Create the container; subclasses may return their own implementation."""
        base_path = self.base_path or self.get_base_path()
        return Application(base_path, working_path=self.working_path)

    def create_application(self) -> IAppContainer:
        """Build the application once; later calls return the same instance."""
        if self._app is not None:
            return self._app

        base_path = self.get_base_path()
        logger.debug("Using base path %s", base_path)
        self.paths.link_vendor(base_path)

        app = self.resolve_application()
        if not isinstance(app, IAppContainer):
            raise ContainerError(
                f"{type(app).__name__} does not implement the application container"
            )
        app.bootstrap_with([LoadEnvironmentVariables(base_path, self.config.env)])

        manifest = PackageManifest(self.config.dont_discover)
        app.instance("package.manifest", manifest)
        app.register(TestbenchServiceProvider)
        app.bootstrap_with(
            [
                RegisterProviders(manifest.providers()),
                RegisterProviders(self.get_package_providers(app)),
            ]
        )

        migrations = self.config.migration_paths()
        if migrations is not None:
            app.bootstrap_with(
                [LoadMigrationsFromArray(migrations, self.working_path)]
            )

        self.define_environment(app)
        app.boot()

        self._app = app
        return app

    def run(
        self, argv: Sequence[str] | None = None, output: TextIO | None = None
    ) -> int:
        """Run one console command and return its exit status.

        Any exception while building the application or running the command
        is reported and rendered once, and the status is 1.
        """
        args = list(sys.argv[1:] if argv is None else argv)
        try:
            app = self.create_application()
            kernel = app.make("console.kernel")
            if not isinstance(kernel, IConsoleKernel):
                raise ConsoleError(
                    f"{type(kernel).__name__} does not implement handle/terminate"
                )
            status = kernel.handle(args, output)
            kernel.terminate(args, status)
        except Exception as error:
            return self.render_exception(error, output)

        logger.debug("Command finished with status %d", status)
        return status

    def handle(self, argv: Sequence[str] | None = None) -> NoReturn:
        """Run the command from process arguments and exit with its status."""
        sys.exit(self.run(argv))

    def render_exception(self, error: Exception, output: TextIO | None = None) -> int:
        """Report and render `error`; always returns exit code 1."""
        handler = None
        if self._app is not None:
            handler = self._app.get("exception.handler")
        if handler is None:
            handler = ExceptionHandler()

        handler.report(error)
        handler.render_for_console(output or sys.stdout, error)
        return 1

"""Console kernel dispatching argv to typer commands."""

import contextlib
import sys
from collections.abc import Callable, Sequence
from typing import Any, TextIO

import typer

from testbench.core.application import Application
from testbench.utils.logging import get_logger

logger = get_logger("console.kernel")

# typer may ship its own copy of click; take the types it actually raises
UsageErrorBase = next(
    cls for cls in typer.BadParameter.__mro__ if cls.__name__ == "ClickException"
)


class ConsoleKernel:
    """Runs console commands registered by service providers.

    Commands receive the application through `ctx.obj`. Command output written
    with `typer.echo`/`print` goes to the `output` stream given to `handle`.
    """

    def __init__(self, app: Application, *, name: str = "testbench") -> None:
        self.app = app
        self.name = name
        self._typer = typer.Typer(
            name=name,
            help="Console for the package test application.",
            add_completion=False,
            pretty_exceptions_enable=False,
        )
        # A root callback keeps typer from collapsing a single command into the root
        self._typer.callback()(self._root)

    @staticmethod
    def _root() -> None:
        """Console for the package test application."""

    def command(self, name: str | None = None, **kwargs: Any) -> Callable:
        """Decorator registering a command, as `typer.Typer.command`."""
        return self._typer.command(name, **kwargs)

    def add_typer(self, sub_app: typer.Typer, *, name: str, **kwargs: Any) -> None:
        """Mount a group of commands under `name`."""
        self._typer.add_typer(sub_app, name=name, **kwargs)

    def command_names(self) -> list[str]:
        group = typer.main.get_command(self._typer)
        return sorted(getattr(group, "commands", {}))

    def handle(self, argv: Sequence[str], output: TextIO | None = None) -> int:
        """Dispatch `argv` and return the command's exit status.

        Usage errors are printed to `output` and return their exit code (2).
        `sys.exit()` inside a command becomes the status, as the interpreter
        would map it. Any other exception propagates to the caller.
        """
        args = list(argv) or ["--help"]
        stream = output or sys.stdout
        command = typer.main.get_command(self._typer)

        logger.debug("Handling console input: %s", args)
        with contextlib.redirect_stdout(stream):
            try:
                result = command.main(
                    args=args,
                    prog_name=self.name,
                    standalone_mode=False,
                    obj=self.app,
                )
            except UsageErrorBase as e:
                e.show(file=stream)
                return e.exit_code
            except typer.Abort:
                typer.echo("Aborted!", file=stream)
                return 1
            except SystemExit as e:
                return self._exit_status(e.code, stream)

        if isinstance(result, bool) or not isinstance(result, int):
            return 0
        return result

    @staticmethod
    def _exit_status(code: Any, stream: TextIO) -> int:
        if code is None:
            return 0
        if isinstance(code, int):
            return code
        typer.echo(str(code), file=stream)
        return 1

    def terminate(self, argv: Sequence[str], status: int) -> None:
        """Run the application's terminating callbacks."""
        logger.debug("Terminating after %s with status %d", list(argv), status)
        self.app.terminate()

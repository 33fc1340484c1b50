import os
import sys
import traceback
from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TextIO, TypeVar

from rich.console import Console
from rich.text import Text
from rich.traceback import Traceback

from testbench.core.exceptions import TestbenchError
from testbench.utils.logging import get_logger

logger = get_logger("core.error_handler")

_TRUTHY = {"1", "true", "yes", "on"}

T = TypeVar("T")
P = ParamSpec("P")


def handle_error(
    error: BaseException | None = None,
    *,
    context: str | None = None,
    verbose: bool = False,
    error_str: str | None = None,
) -> None:
    """Central error reporting for the shim.

    Args:
        error: The exception instance to report (can be None if error_str is provided).
        context: Optional string describing where the error occurred.
        verbose: If True, log the traceback at DEBUG level.
        error_str: Optional error message string if no exception object is available.
    """
    ctx = f"[{context}]" if context else ""

    if error is None:
        logger.critical(f"{ctx} {error_str or 'An unknown error occurred'}".strip())
        return

    if isinstance(error, TestbenchError):
        # Known errors already carry their subsystem prefix
        logger.error(f"{ctx} {error}".strip())
    else:
        error_msg = str(error) or "No error message provided"
        logger.critical(
            f"{ctx} Unexpected error: {type(error).__name__}: {error_msg}".strip()
        )

    if verbose:
        trace = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
        logger.debug(f"Traceback:\n{trace}")


def safe_entrypoint(context: str) -> Callable[[Callable[P, T]], Callable[P, T | None]]:
    """Decorator wrapping entrypoint functions with unified error handling.

    Exceptions are reported through `handle_error` and the wrapper returns
    None. typer/click `Exit` and `Abort` pass through untouched. A `verbose`
    keyword argument, when given, turns on traceback logging.
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T | None]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T | None:
            verbose = bool(kwargs.get("verbose", False))
            try:
                return func(*args, **kwargs)
            except Exception as err:
                name = err.__class__.__name__
                if "Exit" in name or name == "Abort":
                    raise
                handle_error(err, context=context, verbose=verbose)
                return None

        return wrapper

    return decorator


class ExceptionHandler:
    """Reports errors to the log and renders them for the console."""

    def __init__(self, *, debug: bool | None = None, context: str = "testbench"):
        if debug is None:
            debug = os.environ.get("APP_DEBUG", "").strip().lower() in _TRUTHY
        self.debug = debug
        self.context = context

    def report(self, error: BaseException) -> None:
        handle_error(error, context=self.context, verbose=self.debug)

    def render_for_console(self, output: TextIO | None, error: BaseException) -> None:
        """Print the error to `output` (stdout when None).

        Always shows the exception type and message; with debug enabled a rich
        traceback follows.
        """
        console = Console(file=output or sys.stdout, highlight=False, soft_wrap=True)
        console.print()
        console.print(Text(f" {type(error).__name__} ", style="bold white on red"))
        console.print()
        console.print(Text(f"  {error}" if str(error) else "  (no message)"))
        console.print()

        if self.debug and error.__traceback__ is not None:
            console.print(
                Traceback.from_exception(type(error), error, error.__traceback__)
            )

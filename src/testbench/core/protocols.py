"""Protocols (interfaces) for core components.

The Commander only talks to the application container and the console kernel
through these contracts, so both can be replaced by fakes in tests.
"""

from collections.abc import Iterable, Sequence
from typing import Any, Protocol, TextIO, runtime_checkable


@runtime_checkable
class IBootstrapper(Protocol):
    """A setup step run once against the application during construction."""

    def bootstrap(self, app: "IAppContainer") -> None: ...


@runtime_checkable
class IAppContainer(Protocol):
    """Interface of the application container used by the Commander."""

    def register(self, provider: Any) -> Any:
        """Register a service provider (instance, class or dotted path)."""
        ...

    def bootstrap_with(self, bootstrappers: Iterable[IBootstrapper]) -> None:
        """Run the given bootstrappers against the container, in order."""
        ...

    def instance(self, name: str, value: Any) -> Any:
        """Bind an already built value under `name` and return it."""
        ...

    def make(self, name: str) -> Any:
        """Resolve a binding by name.

        Raises:
            ContainerError: If nothing is bound under `name`
        """
        ...

    def get(self, name: str, default: Any = None) -> Any | None:
        """Resolve a binding, or `default` when nothing is bound."""
        ...

    def boot(self) -> None:
        """Boot every registered provider."""
        ...


@runtime_checkable
class IConsoleKernel(Protocol):
    """Interface of the console command dispatcher."""

    def handle(self, argv: Sequence[str], output: TextIO | None = None) -> int:
        """Dispatch a command and return its exit status."""
        ...

    def terminate(self, argv: Sequence[str], status: int) -> None:
        """Run termination hooks after a command finished."""
        ...

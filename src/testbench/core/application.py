"""Application container holding bindings, providers and lifecycle hooks."""

import os
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from testbench.core.exceptions import ContainerError
from testbench.core.protocols import IBootstrapper
from testbench.utils.logging import get_logger

logger = get_logger("core.application")


class Application:
    """Central container for the test application.

    Bindings are either concrete instances (`instance`) or lazily built
    singletons (`bind`). Service providers are registered once per class and
    booted once.
    """

    def __init__(
        self, base_path: str | Path, *, working_path: str | Path | None = None
    ) -> None:
        """Initialize the application.

        Args:
            base_path: Root directory the test application treats as its project root
            working_path: Directory of the package under test, if known
        """
        self._base_path = Path(base_path)
        self._working_path = Path(working_path) if working_path else None
        self._resources: dict[str, Any] = {}
        self._factories: dict[str, Callable[["Application"], Any]] = {}
        self._providers: list[Any] = []
        self._bootstrapped: list[str] = []
        self._terminating: list[Callable[[], None]] = []
        self._booted = False

        self.instance("app", self)
        self.instance("path.base", self._base_path)

    # --- Bindings -----------------------------------------------------------

    def instance(self, name: str, resource: Any) -> Any:
        """Bind an already built resource under `name` and return it."""
        self._factories.pop(name, None)
        self._resources[name] = resource
        return resource

    def bind(self, name: str, factory: Callable[["Application"], Any]) -> None:
        """Bind a factory; it is called on first `make` and the result is shared."""
        self._resources.pop(name, None)
        self._factories[name] = factory

    def make(self, name: str) -> Any:
        """Resolve a binding by name.

        Raises:
            ContainerError: If nothing is bound under `name`
        """
        if name in self._resources:
            return self._resources[name]
        factory = self._factories.get(name)
        if factory is None:
            raise ContainerError(f"Target [{name}] is not bound")
        logger.debug("Resolving [%s]", name)
        return self.instance(name, factory(self))

    def get(self, name: str, default: Any = None) -> Any | None:
        """Resolve a binding, returning `default` when it is not bound."""
        if name not in self:
            return default
        return self.make(name)

    def bound(self, name: str) -> bool:
        return name in self._resources or name in self._factories

    def __contains__(self, name: str) -> bool:
        return self.bound(name)

    def __getitem__(self, name: str) -> Any:
        return self.make(name)

    # --- Providers ----------------------------------------------------------

    def register(self, provider: Any) -> Any:
        """Register a service provider.

        Args:
            provider: Provider instance, provider class or dotted import path

        Returns:
            The registered provider instance. Registering a provider class twice
            returns the existing instance.
        """
        from testbench.providers.base import resolve_provider

        if isinstance(provider, str):
            provider = resolve_provider(provider)
        if isinstance(provider, type):
            provider = provider()

        existing = self.get_provider(type(provider))
        if existing is not None:
            return existing

        logger.debug("Registering provider %s", type(provider).__qualname__)
        provider.register(self)
        self._providers.append(provider)

        if self._booted:
            provider.boot(self)

        return provider

    def get_provider(self, provider_class: type) -> Any | None:
        for provider in self._providers:
            if type(provider) is provider_class:
                return provider
        return None

    @property
    def loaded_providers(self) -> list[str]:
        """Fully qualified names of the registered providers, in order."""
        return [
            f"{type(p).__module__}.{type(p).__qualname__}" for p in self._providers
        ]

    def boot(self) -> None:
        """Boot every registered provider once."""
        if self._booted:
            return
        for provider in list(self._providers):
            provider.boot(self)
        self._booted = True

    def is_booted(self) -> bool:
        return self._booted

    # --- Bootstrapping ------------------------------------------------------

    def bootstrap_with(self, bootstrappers: Iterable[IBootstrapper]) -> None:
        """Run each bootstrapper against the application, in order."""
        for bootstrapper in bootstrappers:
            name = type(bootstrapper).__name__
            logger.debug("Bootstrapping with %s", name)
            bootstrapper.bootstrap(self)
            self._bootstrapped.append(name)

    def has_been_bootstrapped(self, name: str | None = None) -> bool:
        """Whether any bootstrapper (or the one named `name`) has run."""
        if name is None:
            return bool(self._bootstrapped)
        return name in self._bootstrapped

    # --- Termination --------------------------------------------------------

    def terminating(self, callback: Callable[[], None]) -> None:
        """Register a callback to run when the application terminates."""
        self._terminating.append(callback)

    def terminate(self) -> None:
        for callback in self._terminating:
            callback()

    # --- Paths & environment ------------------------------------------------

    def base_path(self, *parts: str) -> Path:
        return self._base_path.joinpath(*parts)

    def database_path(self, *parts: str) -> Path:
        return self.base_path("database", *parts)

    @property
    def working_path(self) -> Path | None:
        return self._working_path

    def environment(self) -> str:
        """Current application environment (APP_ENV, default "testing")."""
        return os.environ.get("APP_ENV") or "testing"

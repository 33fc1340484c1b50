"""Service provider base class and provider resolution."""

import importlib
from typing import TYPE_CHECKING, Any

from testbench.core.exceptions import ProviderError
from testbench.utils.logging import get_logger

if TYPE_CHECKING:
    from testbench.core.application import Application

logger = get_logger("providers.base")


class ServiceProvider:
    """Base class for providers.

    `register` binds services into the container and must not resolve other
    services. `boot` runs after every provider has been registered.
    """

    def register(self, app: "Application") -> None:
        pass

    def boot(self, app: "Application") -> None:
        pass


def resolve_provider(identifier: str) -> Any:
    """Import a provider class from a dotted path.

    Both "package.module:ProviderClass" and "package.module.ProviderClass"
    are accepted.

    Raises:
        ProviderError: If the module or attribute cannot be imported
    """
    if not isinstance(identifier, str) or not identifier.strip():
        raise ProviderError(f"Invalid provider identifier: {identifier!r}")

    identifier = identifier.strip()
    if ":" in identifier:
        module_name, _, attr = identifier.partition(":")
    else:
        module_name, _, attr = identifier.rpartition(".")

    if not module_name or not attr:
        raise ProviderError(
            f"Provider '{identifier}' must look like 'package.module:Provider'"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ProviderError(f"Failed to import provider '{identifier}': {e}") from e

    try:
        provider = getattr(module, attr)
    except AttributeError as e:
        raise ProviderError(
            f"Module '{module_name}' has no provider named '{attr}'"
        ) from e

    logger.debug("Resolved provider %s", identifier)
    return provider

class TestbenchError(Exception):
    """Base exception for all testbench errors.

    The message is automatically prefixed with the subsystem name in square brackets.
    """

    __test__ = False  # keep pytest from collecting the class

    subsystem = "core"

    def __init__(self, message: str, *, subsystem: str | None = None) -> None:
        self.subsystem = subsystem or self.subsystem
        super().__init__(f"[{self.subsystem}] {message}")


# ─── Subsystem-level exceptions ───────────────────────────────────────────────


class ConfigError(TestbenchError):
    """Raised for configuration loading or validation errors."""

    subsystem = "config"


class ContainerError(TestbenchError):
    """Raised when the application container cannot resolve a binding."""

    subsystem = "container"


class ProviderError(TestbenchError):
    """Raised when a service provider cannot be imported or registered."""

    subsystem = "providers"


class MigrationError(TestbenchError):
    """Raised for migration discovery or execution errors."""

    subsystem = "migrations"


class ConsoleError(TestbenchError):
    """Raised for console kernel and command dispatch issues."""

    subsystem = "console"

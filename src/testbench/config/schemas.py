"""Configuration schema for the testbench shim."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from testbench.core.exceptions import ConfigError


class TestbenchConfig(BaseModel):
    """Configuration record read once at process start.

    Mirrors the keys of `testbench.yaml`; `dont-discover` is accepted either
    dashed or as `dont_discover`.
    """

    __test__ = False  # keep pytest from collecting the class

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    laravel: str | None = Field(
        default=None,
        description="Base path override; './' is replaced with the working path",
    )
    env: list[str] = Field(
        default_factory=list,
        description="Ordered KEY=value lines used when the base path has no .env",
    )
    providers: list[str] = Field(
        default_factory=list,
        description="Dotted import paths of providers to register",
    )
    dont_discover: list[str] = Field(
        default_factory=list,
        alias="dont-discover",
        description="Entry-point names or distributions excluded from discovery",
    )
    migrations: list[str] | bool = Field(
        default=True,
        description="Migration paths to load, or false to skip migration loading",
    )

    @field_validator("env", "providers", "dont_discover", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("env", mode="before")
    @classmethod
    def _env_mapping_as_lines(cls, value: Any) -> Any:
        # Allow `env: {APP_KEY: secret}` as a shorthand for `env: ["APP_KEY=secret"]`
        if isinstance(value, dict):
            return [f"{key}={val}" for key, val in value.items()]
        return value

    @field_validator("migrations", mode="before")
    @classmethod
    def _migrations_default(cls, value: Any) -> Any:
        if value is None:
            return True
        if isinstance(value, str):
            return [value]
        return value

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> TestbenchConfig:
        """Validate a raw mapping into a config.

        Raises:
            ConfigError: If the data does not match the schema
        """
        try:
            return cls.model_validate(data or {})
        except ValidationError as e:
            raise ConfigError(f"Invalid testbench configuration: {e}") from e

    def migration_paths(self) -> list[str] | None:
        """Migration paths to load, or None when migrations are disabled."""
        if self.migrations is False:
            return None
        if self.migrations is True:
            return []
        return list(self.migrations)

"""Migration path registry and runner.

A migration is a Python file exposing `up(app)`. Files are ordered by name,
so the usual `2024_01_01_000000_create_users.py` prefix gives run order.
"""

import importlib.util
import json
from pathlib import Path
from types import ModuleType
from typing import Any

from testbench.core.exceptions import MigrationError
from testbench.utils.logging import get_logger

logger = get_logger("database.migrator")


class Migrator:
    """Keeps the registered migration paths and which migrations have run.

    With a `repository` file the ran list is read from and written to JSON,
    so a migration runs once across processes. Without one it lives in memory.
    """

    def __init__(self, repository: str | Path | None = None) -> None:
        self._paths: list[Path] = []
        self.repository = Path(repository) if repository is not None else None
        self._ran: list[str] = self._read_repository()

    def path(self, path: str | Path) -> None:
        """Register a directory (or single file) containing migrations."""
        path = Path(path)
        if path not in self._paths:
            self._paths.append(path)
            logger.debug("Registered migration path %s", path)

    def paths(self) -> list[Path]:
        return list(self._paths)

    def migration_files(self) -> dict[str, Path]:
        """Map migration name to file, sorted by name.

        Missing paths are skipped; files starting with an underscore are ignored.
        """
        files: dict[str, Path] = {}
        for path in self._paths:
            if path.is_file():
                candidates = [path]
            elif path.is_dir():
                candidates = list(path.glob("*.py"))
            else:
                logger.debug("Migration path %s does not exist, skipping", path)
                continue

            for file in candidates:
                if file.suffix == ".py" and not file.name.startswith("_"):
                    files.setdefault(file.stem, file)

        return dict(sorted(files.items()))

    def ran(self) -> list[str]:
        return list(self._ran)

    def pending(self) -> dict[str, Path]:
        return {
            name: file
            for name, file in self.migration_files().items()
            if name not in self._ran
        }

    def status(self) -> list[tuple[str, bool]]:
        return [(name, name in self._ran) for name in self.migration_files()]

    def run(self, app: Any) -> list[str]:
        """Run every pending migration and return the names that ran.

        Raises:
            MigrationError: If a migration cannot be loaded, has no `up`
                function, or fails while running
        """
        executed: list[str] = []
        for name, file in self.pending().items():
            module = self._load(name, file)
            up = getattr(module, "up", None)
            if not callable(up):
                raise MigrationError(f"Migration '{name}' does not define up(app)")

            logger.info("Migrating: %s", name)
            try:
                up(app)
            except Exception as e:
                raise MigrationError(f"Migration '{name}' failed: {e}") from e

            self._ran.append(name)
            self._write_repository()
            executed.append(name)

        return executed

    def _load(self, name: str, file: Path) -> ModuleType:
        spec = importlib.util.spec_from_file_location(
            f"testbench_migrations.{name}", file
        )
        if spec is None or spec.loader is None:
            raise MigrationError(f"Cannot load migration file {file}")

        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            raise MigrationError(f"Failed to import migration '{name}': {e}") from e
        return module

    def _read_repository(self) -> list[str]:
        if self.repository is None or not self.repository.exists():
            return []
        try:
            data = json.loads(self.repository.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise MigrationError(
                f"Cannot read migration repository {self.repository}: {e}"
            ) from e

        ran = data.get("ran") if isinstance(data, dict) else None
        if not isinstance(ran, list) or not all(isinstance(n, str) for n in ran):
            raise MigrationError(
                f"Migration repository {self.repository} has no 'ran' list"
            )
        logger.debug("Loaded %d ran migrations from %s", len(ran), self.repository)
        return ran

    def _write_repository(self) -> None:
        if self.repository is None:
            return
        try:
            self.repository.parent.mkdir(parents=True, exist_ok=True)
            self.repository.write_text(
                json.dumps({"ran": self._ran}, indent=2), encoding="utf-8"
            )
        except OSError as e:
            raise MigrationError(
                f"Cannot write migration repository {self.repository}: {e}"
            ) from e

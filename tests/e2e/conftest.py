"""Pytest configuration and fixtures for e2e CLI tests."""

import textwrap

import pytest
import yaml


@pytest.fixture
def package_dir(tmp_path, monkeypatch):
    """A package under test with testbench.yaml, an app skeleton and a migration."""
    package = tmp_path / "package"
    (package / "app").mkdir(parents=True)
    migrations = package / "database" / "migrations"
    migrations.mkdir(parents=True)
    (migrations / "2024_01_01_000000_create_marker.py").write_text(
        textwrap.dedent(
            """
            def up(app):
                (app.base_path() / "migrated.txt").write_text("ok")
            """
        )
    )

    config = {
        "laravel": "./app",
        "env": ['APP_ENV="e2e"'],
        "dont-discover": ["*"],
        "migrations": ["./database/migrations"],
    }
    (package / "testbench.yaml").write_text(yaml.safe_dump(config))

    monkeypatch.setenv("TESTBENCH_WORKING_PATH", str(package))
    monkeypatch.delenv("APP_ENV", raising=False)
    return package


@pytest.fixture
def run_cli(capsys):
    """Run the console script and return (exit code, stdout)."""
    from testbench.cli.main import main

    def _run(*argv):
        with pytest.raises(SystemExit) as exc_info:
            main(list(argv))
        return exc_info.value.code, capsys.readouterr().out

    return _run

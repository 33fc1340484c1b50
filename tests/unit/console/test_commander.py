"""Unit tests for the Commander bootstrap shim."""

import io
import os
import sys
import textwrap
from unittest.mock import Mock, patch

import pytest
import typer

from testbench.config.path_manager import PathManager
from testbench.config.schemas import TestbenchConfig
from testbench.console.commander import Commander
from testbench.core.application import Application
from testbench.core.error_handler import ExceptionHandler
from testbench.core.exceptions import ConfigError
from testbench.providers.base import ServiceProvider
from testbench.providers.testbench_provider import TestbenchServiceProvider


@pytest.fixture
def config():
    return {"laravel": "./app", "dont-discover": ["*"]}


@pytest.fixture
def commander(config, working_path):
    return Commander(config, working_path)


class FakeKernel:
    def __init__(self, status=0):
        self.status = status
        self.handled = []
        self.terminated = []

    def handle(self, argv, output=None):
        self.handled.append((list(argv), output))
        return self.status

    def terminate(self, argv, status):
        self.terminated.append((list(argv), status))


class TestConstruction:
    def test_accepts_mapping_or_config(self, working_path):
        from_dict = Commander({"providers": ["a.b:C"]}, working_path)
        from_model = Commander(TestbenchConfig(providers=["a.b:C"]), working_path)

        assert from_dict.config == from_model.config
        assert Commander(None, working_path).config == TestbenchConfig()

    def test_invalid_mapping_raises(self, working_path):
        with pytest.raises(ConfigError):
            Commander({"env": 5}, working_path)


class TestBasePath:
    def test_relative_token_substituted_with_working_path(self, working_path):
        commander = Commander({"laravel": "./skeleton/app"}, working_path)

        assert commander.get_base_path() == f"{working_path}/skeleton/app"
        assert commander.base_path == f"{working_path}/skeleton/app"

    def test_absolute_override_is_used_verbatim(self, working_path, tmp_path):
        commander = Commander({"laravel": str(tmp_path / "elsewhere")}, working_path)

        assert commander.get_base_path() == str(tmp_path / "elsewhere")

    def test_default_application_path_when_unset(self, working_path):
        commander = Commander({}, working_path)

        assert commander.get_base_path() == str(PathManager.default_base_path())

    def test_application_receives_base_path_explicitly(self, commander, working_path):
        app = commander.create_application()

        assert app.base_path() == working_path / "app"
        assert app.working_path == working_path


class TestCreateApplication:
    def test_is_memoized(self, commander):
        with patch.object(
            Commander, "resolve_application", wraps=commander.resolve_application
        ) as resolve:
            first = commander.create_application()
            second = commander.create_application()

        assert first is second
        resolve.assert_called_once()

    def test_registers_internal_provider_and_boots(self, commander):
        app = commander.create_application()

        assert app.get_provider(TestbenchServiceProvider) is not None
        assert app.is_booted()
        assert app.has_been_bootstrapped("LoadEnvironmentVariables")

    def test_provider_order(self, config, working_path, tmp_path, monkeypatch):
        (tmp_path / "pkg_providers.py").write_text(
            textwrap.dedent(
                """
                from testbench.providers.base import ServiceProvider


                class DiscoveredProvider(ServiceProvider):
                    pass


                class PackageProvider(ServiceProvider):
                    pass
                """
            )
        )
        monkeypatch.syspath_prepend(str(tmp_path))
        config = {
            **config,
            "dont-discover": [],
            "providers": ["pkg_providers:PackageProvider"],
        }

        with patch(
            "testbench.console.commander.PackageManifest.providers",
            return_value=["pkg_providers:DiscoveredProvider"],
        ):
            app = Commander(config, working_path).create_application()

        assert app.loaded_providers == [
            "testbench.providers.testbench_provider.TestbenchServiceProvider",
            "pkg_providers.DiscoveredProvider",
            "pkg_providers.PackageProvider",
        ]

    def test_dont_discover_is_passed_to_manifest(self, working_path):
        commander = Commander(
            {"laravel": "./app", "dont-discover": ["x"]}, working_path
        )

        app = commander.create_application()

        assert app.make("package.manifest").dont_discover == {"x"}

    def test_define_environment_runs_before_boot(self, config, working_path):
        seen = {}

        class CustomCommander(Commander):
            def define_environment(self, app):
                seen["booted"] = app.is_booted()
                app.instance("custom", "value")

        app = CustomCommander(config, working_path).create_application()

        assert seen == {"booted": False}
        assert app.make("custom") == "value"

    def test_get_package_providers_can_be_overridden(self, config, working_path):
        class Extra(ServiceProvider):
            pass

        class CustomCommander(Commander):
            def get_package_providers(self, app):
                return [Extra]

        app = CustomCommander(config, working_path).create_application()

        assert app.get_provider(Extra) is not None

    def test_links_vendor_directory(self, commander, working_path):
        (working_path / "vendor").mkdir()

        commander.create_application()

        assert (working_path / "app" / "vendor").is_symlink()

    def test_does_not_create_directories_under_base_path(
        self, commander, working_path
    ):
        before = sorted(working_path.rglob("*"))

        commander.create_application()

        assert sorted(working_path.rglob("*")) == before
        assert not (working_path / "app" / "database").exists()

    def test_resolve_application_may_return_another_container(
        self, config, working_path
    ):
        class TracingApplication(Application):
            def __init__(self, *args, **kwargs):
                super().__init__(*args, **kwargs)
                self.bootstrapped = []

            def bootstrap_with(self, bootstrappers):
                bootstrappers = list(bootstrappers)
                self.bootstrapped.extend(type(b).__name__ for b in bootstrappers)
                super().bootstrap_with(bootstrappers)

        class CustomCommander(Commander):
            def resolve_application(self):
                return TracingApplication(
                    self.get_base_path(), working_path=self.working_path
                )

        commander = CustomCommander(config, working_path)

        app = commander.create_application()

        assert isinstance(app, TracingApplication)
        assert app.bootstrapped[0] == "LoadEnvironmentVariables"
        assert commander.run(["env"], io.StringIO()) == 0

    def test_resolve_application_must_return_a_container(self, config, working_path):
        class BrokenCommander(Commander):
            def resolve_application(self):
                return object()

        output = io.StringIO()

        status = BrokenCommander(config, working_path).run(["about"], output)

        assert status == 1
        assert "ContainerError" in output.getvalue()


class TestMigrations:
    def test_disabled_migrations_skip_bootstrapper(self, config, working_path):
        commander = Commander({**config, "migrations": False}, working_path)

        with patch("testbench.console.commander.LoadMigrationsFromArray") as loader:
            app = commander.create_application()

        loader.assert_not_called()
        assert not app.has_been_bootstrapped("LoadMigrationsFromArray")

    @pytest.mark.parametrize(
        "migrations", [[], ["./database/migrations"], ["a", "./b", "/c"]]
    )
    def test_list_is_passed_exactly(self, config, working_path, migrations):
        commander = Commander({**config, "migrations": migrations}, working_path)

        with patch("testbench.console.commander.LoadMigrationsFromArray") as loader:
            commander.create_application()

        loader.assert_called_once_with(migrations, working_path)
        loader.return_value.bootstrap.assert_called_once()

    def test_paths_reach_the_migrator(self, config, working_path):
        commander = Commander(
            {**config, "migrations": ["./database/migrations"]}, working_path
        )

        app = commander.create_application()

        assert app.make("migrator").paths() == [
            working_path / "database" / "migrations"
        ]

    def test_migrations_run_once_across_commanders(self, config, working_path):
        migrations = working_path / "database" / "migrations"
        migrations.mkdir(parents=True)
        (migrations / "2024_01_01_000000_count_runs.py").write_text(
            textwrap.dedent(
                """
                def up(app):
                    marker = app.base_path("runs.txt")
                    count = int(marker.read_text()) if marker.exists() else 0
                    marker.write_text(str(count + 1))
                """
            )
        )
        config = {**config, "migrations": ["./database/migrations"]}

        first = io.StringIO()
        assert Commander(config, working_path).run(["migrate"], first) == 0
        second = io.StringIO()
        assert Commander(config, working_path).run(["migrate"], second) == 0
        status = io.StringIO()
        assert Commander(config, working_path).run(["migrate:status"], status) == 0

        assert "Migrated: 2024_01_01_000000_count_runs" in first.getvalue()
        assert "Nothing to migrate." in second.getvalue()
        assert (working_path / "app" / "runs.txt").read_text() == "1"
        assert "Yes" in status.getvalue()
        assert (working_path / "app" / "database" / ".migrations.json").exists()


class TestEnvironment:
    def test_env_file_at_base_path_wins(self, config, working_path, monkeypatch):
        monkeypatch.delenv("FROM_FILE", raising=False)
        monkeypatch.delenv("FROM_CONFIG", raising=False)
        (working_path / "app" / ".env").write_text("FROM_FILE=file\n")
        commander = Commander({**config, "env": ["FROM_CONFIG=config"]}, working_path)

        commander.create_application()

        assert os.environ["FROM_FILE"] == "file"
        assert "FROM_CONFIG" not in os.environ

    def test_config_env_without_env_file(self, config, working_path, monkeypatch):
        monkeypatch.delenv("FROM_CONFIG", raising=False)
        commander = Commander({**config, "env": ["FROM_CONFIG=config"]}, working_path)

        commander.create_application()

        assert os.environ["FROM_CONFIG"] == "config"

    def test_default_env_when_config_env_empty(self, commander, clean_app_env):
        app = commander.create_application()

        assert os.environ["APP_ENV"] == "testing"
        assert "APP_KEY" in os.environ
        assert app.environment() == "testing"


class TestRun:
    def test_delegates_to_kernel_and_terminates(self, commander):
        app = commander.create_application()
        kernel = FakeKernel(status=5)
        app.instance("console.kernel", kernel)
        output = io.StringIO()

        status = commander.run(["about", "--verbose"], output)

        assert status == 5
        assert kernel.handled == [(["about", "--verbose"], output)]
        assert kernel.terminated == [(["about", "--verbose"], 5)]

    def test_defaults_to_process_arguments(self, commander, monkeypatch):
        app = commander.create_application()
        kernel = FakeKernel()
        app.instance("console.kernel", kernel)
        monkeypatch.setattr(sys, "argv", ["testbench", "env"])

        assert commander.run() == 0
        assert kernel.handled[0][0] == ["env"]

    def test_runs_builtin_command(self, commander, working_path):
        output = io.StringIO()

        status = commander.run(["about"], output)

        assert status == 0
        assert f"Base path: {working_path / 'app'}" in output.getvalue()

    def test_sys_exit_in_command_still_terminates(self, commander):
        app = commander.create_application()
        handler = Mock()
        app.instance("exception.handler", handler)
        callback = Mock()
        app.terminating(callback)

        @app.make("console.kernel").command("bail")
        def bail() -> None:
            sys.exit(3)

        assert commander.run(["bail"], io.StringIO()) == 3
        callback.assert_called_once_with()
        handler.render_for_console.assert_not_called()

    def test_handle_exits_with_status(self, commander):
        app = commander.create_application()
        app.instance("console.kernel", FakeKernel(status=4))

        with pytest.raises(SystemExit) as exc_info:
            commander.handle(["anything"])

        assert exc_info.value.code == 4


class TestExceptions:
    def test_build_failure_renders_once_and_returns_one(self, commander):
        output = io.StringIO()

        with (
            patch.object(
                Commander, "resolve_application", side_effect=RuntimeError("no app")
            ),
            patch.object(ExceptionHandler, "report") as report,
            patch.object(ExceptionHandler, "render_for_console") as render,
        ):
            status = commander.run(["about"], output)

        assert status == 1
        report.assert_called_once()
        render.assert_called_once()
        rendered_output, error = render.call_args.args
        assert rendered_output is output
        assert str(error) == "no app"

    def test_kernel_failure_uses_application_handler(self, commander):
        app = commander.create_application()
        handler = Mock()
        app.instance("exception.handler", handler)

        @app.make("console.kernel").command("boom")
        def boom() -> None:
            raise ValueError("exploded")

        output = io.StringIO()
        status = commander.run(["boom"], output)

        assert status == 1
        handler.report.assert_called_once()
        handler.render_for_console.assert_called_once()
        rendered_output, error = handler.render_for_console.call_args.args
        assert rendered_output is output
        assert isinstance(error, ValueError)

    def test_unknown_provider_is_rendered(self, config, working_path):
        commander = Commander(
            {**config, "providers": ["missing_module_abc:Provider"]}, working_path
        )
        output = io.StringIO()

        status = commander.run(["about"], output)

        assert status == 1
        assert "ProviderError" in output.getvalue()
        assert "missing_module_abc" in output.getvalue()

    def test_kernel_without_contract_is_rendered(self, commander):
        app = commander.create_application()
        app.instance("console.kernel", object())
        output = io.StringIO()

        status = commander.run(["about"], output)

        assert status == 1
        assert "ConsoleError" in output.getvalue()
        assert "does not implement handle/terminate" in output.getvalue()

    def test_command_exit_code_is_not_an_exception(self, commander):
        app = commander.create_application()
        handler = Mock()
        app.instance("exception.handler", handler)

        @app.make("console.kernel").command("quit")
        def quit_command() -> None:
            raise typer.Exit(9)

        assert commander.run(["quit"], io.StringIO()) == 9
        handler.render_for_console.assert_not_called()


def test_application_type(commander):
    assert isinstance(commander.create_application(), Application)

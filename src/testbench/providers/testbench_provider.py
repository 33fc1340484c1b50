"""Internal provider wiring the console kernel, migrator and built-in commands."""

import typer
from rich.console import Console
from rich.table import Table

from testbench.console.kernel import ConsoleKernel
from testbench.core.application import Application
from testbench.core.error_handler import ExceptionHandler
from testbench.database.migrator import Migrator
from testbench.providers.base import ServiceProvider
from testbench.providers.discovery import PackageManifest


class TestbenchServiceProvider(ServiceProvider):
    """Registered on every application built by the Commander."""

    __test__ = False  # keep pytest from collecting the class

    def register(self, app: Application) -> None:
        if not app.bound("console.kernel"):
            app.bind("console.kernel", ConsoleKernel)
        if not app.bound("exception.handler"):
            app.bind("exception.handler", lambda _app: ExceptionHandler())
        if not app.bound("migrator"):
            app.bind(
                "migrator",
                lambda container: Migrator(
                    container.database_path(".migrations.json")
                ),
            )
        if not app.bound("package.manifest"):
            app.bind("package.manifest", lambda _app: PackageManifest())

    def boot(self, app: Application) -> None:
        kernel = app.make("console.kernel")
        kernel.command("about")(about)
        kernel.command("env")(env)
        kernel.command("package:discover")(package_discover)
        kernel.command("migrate")(migrate)
        kernel.command("migrate:status")(migrate_status)


def about(ctx: typer.Context) -> None:
    """Show basic information about the test application."""
    app: Application = ctx.obj
    typer.echo(f"Base path: {app.base_path()}")
    typer.echo(f"Environment: {app.environment()}")
    typer.echo("Providers:")
    for provider in app.loaded_providers:
        typer.echo(f"  {provider}")
    typer.echo("Migration paths:")
    for path in app.make("migrator").paths():
        typer.echo(f"  {path}")


def env(ctx: typer.Context) -> None:
    """Display the current application environment."""
    app: Application = ctx.obj
    typer.echo(f"The application environment is [{app.environment()}].")


def package_discover(ctx: typer.Context) -> None:
    """List providers found through package discovery."""
    app: Application = ctx.obj
    providers = app.make("package.manifest").providers()
    if not providers:
        typer.echo("No package providers discovered.")
        return
    for provider in providers:
        typer.echo(f"Discovered: {provider}")


def migrate(ctx: typer.Context) -> None:
    """Run the pending migrations."""
    app: Application = ctx.obj
    executed = app.make("migrator").run(app)
    if not executed:
        typer.echo("Nothing to migrate.")
        return
    for name in executed:
        typer.echo(f"Migrated: {name}")


def migrate_status(ctx: typer.Context) -> None:
    """Show the status of each migration."""
    app: Application = ctx.obj
    status = app.make("migrator").status()
    if not status:
        typer.echo("No migrations found.")
        return

    table = Table(title="Migrations")
    table.add_column("Ran?")
    table.add_column("Migration")
    for name, ran in status:
        table.add_row("Yes" if ran else "No", name)
    Console().print(table)

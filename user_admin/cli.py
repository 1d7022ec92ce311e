"""
User Admin - command line interface

Lists, searches, edits and exports the users of the users backend.

Usage:
    user-admin init                     # Create config/local.yaml
    user-admin list --search ann        # Show (filtered) users
    user-admin add --first Jo ...       # Create a user
    user-admin edit 7 --hobby Chess     # Update a user
    user-admin delete 7                 # Delete after confirmation
    user-admin export                   # Write users.csv
    user-admin serve                    # Start the web API
"""

import asyncio
import os
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, TypeVar

import typer
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from user_admin.clients.base import FetchError
from user_admin.clients.users import UserClient
from user_admin.core.config import Settings, load_yaml_config, yaml_to_env
from user_admin.core.logging import get_logger, setup_logging
from user_admin.export.csv_exporter import UsersCSVExporter
from user_admin.models.user import User
from user_admin.ui.controller import AdminController
from user_admin.ui.form import FormValidationError, UserForm

app = typer.Typer(help="User Admin - CLI Tool")
console = Console()
logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path("config") / "local.yaml"

T = TypeVar("T")


class ConsoleNotifier:
    """Shows alerts in red and remembers them for the exit code."""

    def __init__(self) -> None:
        self.alerts: List[str] = []

    def __call__(self, message: str) -> None:
        self.alerts.append(message)
        console.print(f"[red]✗ {message}[/red]")


def load_settings(config_path: Path = DEFAULT_CONFIG_PATH) -> Settings:
    """
    Apply config/local.yaml (if present) to the environment and read settings.

    Args:
        config_path: Path to the local YAML configuration

    Returns:
        Fresh settings reflecting the YAML file and environment
    """
    config = load_yaml_config(config_path)
    for key, value in yaml_to_env(config).items():
        os.environ[key] = value

    cfg = Settings()
    setup_logging(cfg)
    return cfg


def make_client(cfg: Settings) -> UserClient:
    return UserClient(base_url=cfg.api_base_url, timeout=cfg.api_timeout)


def run_with_controller(
    cfg: Settings,
    action: Callable[[AdminController], Awaitable[T]],
    assume_yes: bool = False,
) -> tuple[T, ConsoleNotifier]:
    """
    Run one admin action against a fresh client and controller.

    Returns:
        The action's result and the notifier holding any alerts
    """
    notifier = ConsoleNotifier()

    def confirm(message: str) -> bool:
        return assume_yes or typer.confirm(message)

    async def runner() -> T:
        async with make_client(cfg) as client:
            controller = AdminController(
                client,
                exporter=UsersCSVExporter(filename=cfg.export_filename),
                notifier=notifier,
                confirm=confirm,
                debounce_seconds=cfg.search_debounce_seconds,
            )
            return await action(controller)

    return asyncio.run(runner()), notifier


def render_users(users: List[User], title: str = "Users") -> Table:
    table = Table(title=title)
    for column in ("ID", "First", "Last", "Email", "Phone", "Location", "Hobby"):
        table.add_column(column, style="cyan" if column == "ID" else None)
    for user in users:
        table.add_row(
            str(user.id), user.first, user.last, user.email, user.phone, user.location, user.hobby
        )
    return table


def apply_fields(form: UserForm, **fields: Optional[str]) -> None:
    for name, value in fields.items():
        if value is not None:
            form.set_field(name, value)


async def submit(controller: AdminController) -> Optional[User]:
    try:
        return await controller.submit_form()
    except FormValidationError as e:
        console.print(f"[red]✗ {e}[/red]")
        return None
    except FetchError:
        # Already reported through the notifier
        return None


ConfigOption = typer.Option(DEFAULT_CONFIG_PATH, "--config", help="Path to local.yaml")


@app.command("list")
def list_users(
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Search term"),
    config: Path = ConfigOption,
) -> None:
    """Show users, optionally filtered by the backend."""
    cfg = load_settings(config)

    async def action(controller: AdminController) -> List[User]:
        controller.search_term = search or ""
        return await controller.load_users(search)

    users, notifier = run_with_controller(cfg, action)
    if notifier.alerts:
        raise typer.Exit(1)

    if not users:
        console.print("[yellow]No users found[/yellow]")
        return
    console.print(render_users(users))


@app.command()
def add(
    first: str = typer.Option(..., prompt="First name"),
    last: str = typer.Option(..., prompt="Last name"),
    email: str = typer.Option(..., prompt="Email"),
    phone: str = typer.Option("", help="Phone"),
    location: str = typer.Option("", help="Location"),
    hobby: str = typer.Option("", help="Hobby"),
    config: Path = ConfigOption,
) -> None:
    """Create a user."""
    cfg = load_settings(config)

    async def action(controller: AdminController) -> Optional[User]:
        form = controller.open_add()
        apply_fields(
            form, first=first, last=last, email=email, phone=phone, location=location, hobby=hobby
        )
        return await submit(controller)

    user, _ = run_with_controller(cfg, action)
    if user is None:
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] User {user.id} created: {user.display_name()}")


@app.command()
def edit(
    user_id: int = typer.Argument(..., help="ID of the user to edit"),
    first: Optional[str] = typer.Option(None),
    last: Optional[str] = typer.Option(None),
    email: Optional[str] = typer.Option(None),
    phone: Optional[str] = typer.Option(None),
    location: Optional[str] = typer.Option(None),
    hobby: Optional[str] = typer.Option(None),
    config: Path = ConfigOption,
) -> None:
    """
    Update the given fields of a user; other fields keep their value.

    The edit form is hydrated from the current record, so the list is read
    first. An id missing from that list is reported here without a PUT; a
    failed PUT is the generic backend error like any other.
    """
    cfg = load_settings(config)

    async def action(controller: AdminController) -> Optional[User]:
        users = await controller.load_users()
        existing = next((u for u in users if u.id == user_id), None)
        if existing is None:
            if not (isinstance(controller.notifier, ConsoleNotifier) and controller.notifier.alerts):
                console.print(f"[red]✗ User {user_id} not found[/red]")
            return None
        form = controller.open_edit(existing)
        if form is None:
            return None
        apply_fields(
            form, first=first, last=last, email=email, phone=phone, location=location, hobby=hobby
        )
        return await submit(controller)

    user, _ = run_with_controller(cfg, action)
    if user is None:
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] User {user.id} updated")


@app.command()
def delete(
    user_id: int = typer.Argument(..., help="ID of the user to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    config: Path = ConfigOption,
) -> None:
    """Delete a user after confirmation."""
    cfg = load_settings(config)

    async def action(controller: AdminController) -> bool:
        return await controller.delete(user_id)

    deleted, notifier = run_with_controller(cfg, action, assume_yes=yes)
    if notifier.alerts:
        raise typer.Exit(1)
    if not deleted:
        console.print("[yellow]Delete cancelled[/yellow]")
        return
    console.print(f"[green]✓[/green] User {user_id} deleted")


@app.command("export")
def export_csv(
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", "-o", help="Directory for users.csv"
    ),
    config: Path = ConfigOption,
) -> None:
    """
    Export every user as CSV (semicolon-separated, UTF-8 with BOM).

    The search filter is never applied: the file always holds all users.
    """
    cfg = load_settings(config)
    target_dir = output_dir or Path(cfg.export_output_dir)

    export, _ = run_with_controller(cfg, lambda controller: controller.export_csv())
    if export is None:
        raise typer.Exit(1)

    path = UsersCSVExporter(filename=export.filename).write(export, target_dir)

    table = Table(title="Export")
    table.add_column("File", style="cyan")
    table.add_column("Users", style="green")
    table.add_row(str(path), str(export.row_count))
    console.print(table)


@app.command()
def serve(config: Path = ConfigOption) -> None:
    """Start the web API."""
    import uvicorn

    cfg = load_settings(config)
    uvicorn.run(
        "user_admin.api.main:app",
        host=cfg.api_host,
        port=cfg.api_port,
        reload=cfg.is_development,
        log_level=cfg.log_level.lower(),
    )


def build_config_interactively(existing: dict) -> dict:
    """Ask for every local.yaml value, defaulting to the existing ones."""
    backend = existing.get("backend") or {}
    app_section = existing.get("app") or {}
    ui = existing.get("ui") or {}
    export = existing.get("export") or {}
    server = existing.get("server") or {}

    console.print(Panel("[bold cyan]Users Backend[/bold cyan]", expand=False))
    api_base_url = Prompt.ask(
        "Backend URL", default=str(backend.get("api_base_url", "http://localhost:3001"))
    )
    api_timeout = Prompt.ask("Request timeout (s)", default=str(backend.get("api_timeout", 30)))

    console.print(Panel("[bold cyan]Application[/bold cyan]", expand=False))
    environment = Prompt.ask(
        "Environment",
        choices=["development", "staging", "production"],
        default=str(app_section.get("environment", "production")),
    )
    log_level = Prompt.ask("Log level", default=str(app_section.get("log_level", "INFO")))
    log_format = Prompt.ask(
        "Log format", choices=["json", "text"], default=str(app_section.get("log_format", "text"))
    )

    console.print(Panel("[bold cyan]Admin UI & Export[/bold cyan]", expand=False))
    debounce = Prompt.ask(
        "Search debounce (ms)", default=str(ui.get("search_debounce_ms", 300))
    )
    output_dir = Prompt.ask("CSV output directory", default=str(export.get("output_dir", "./exports")))

    console.print(Panel("[bold cyan]Web API[/bold cyan]", expand=False))
    host = Prompt.ask("Host", default=str(server.get("host", "0.0.0.0")))
    port = Prompt.ask("Port", default=str(server.get("port", 8000)))

    return {
        "backend": {"api_base_url": api_base_url, "api_timeout": int(api_timeout)},
        "app": {"environment": environment, "log_level": log_level, "log_format": log_format},
        "ui": {"search_debounce_ms": int(debounce)},
        "export": {"output_dir": output_dir},
        "server": {"host": host, "port": int(port)},
    }


@app.command()
def init(config: Path = ConfigOption) -> None:
    """Create or update config/local.yaml interactively."""
    console.print()
    console.print(Panel.fit(
        "[bold green]User Admin - Setup[/bold green]\n"
        "Creates the local configuration file.",
        border_style="green"
    ))

    if config.exists() and not Confirm.ask(
        f"{config} already exists. Overwrite?", default=False
    ):
        console.print("[yellow]Setup cancelled[/yellow]")
        raise typer.Exit(0)

    try:
        values = build_config_interactively(load_yaml_config(config))
    except ValueError as e:
        console.print(f"[red]✗ Invalid value: {e}[/red]")
        raise typer.Exit(1)

    config.parent.mkdir(parents=True, exist_ok=True)
    with open(config, "w", encoding="utf-8") as f:
        yaml.dump(values, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    console.print(f"[green]✓[/green] Configuration saved: {config}")
    console.print("Next: [cyan]user-admin list[/cyan]")


if __name__ == "__main__":
    app()

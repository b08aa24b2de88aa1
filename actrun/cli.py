"""CLI commands for actrun."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from actrun import __version__

if TYPE_CHECKING:
    from actrun.core.config import ActrunConfig
    from actrun.core.runner import CommandRunner, RunResult

# Load .env file from current directory or parent directories
load_dotenv()

app = typer.Typer(
    name="actrun",
    help="UI automation action runner - execute command files against a device",
    no_args_is_help=True,
)
console = Console()

STATUS_STYLES = {
    "passed": "[green]✓ passed[/green]",
    "failed": "[red]✗ failed[/red]",
    "error": "[bold red]! error[/bold red]",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"actrun version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """actrun - UI automation action runner."""
    pass


def build_runner(config: ActrunConfig) -> CommandRunner:
    """Wire the adb backend, resolver, decoder and executor into a runner."""
    from actrun.core.decoder import CommandDecoder
    from actrun.core.device_controller import AdbBackend
    from actrun.core.element_resolver import UiHierarchyResolver
    from actrun.core.executor import ActionExecutor
    from actrun.core.expectation import build_condition
    from actrun.core.runner import CommandRunner

    backend = AdbBackend(config.device or "", swipe_duration_ms=config.adb.swipe_duration_ms)
    resolver = UiHierarchyResolver(
        backend,
        timeout=config.timeouts.resolve,
        poll_interval=config.adb.poll_interval,
    )
    decoder = CommandDecoder(resolver, lambda record: build_condition(record, resolver.query))
    return CommandRunner(
        decoder,
        ActionExecutor(backend),
        timeout=config.timeouts.command,
        stop_on_failure=config.stop_on_failure,
    )


@app.command()
def run(
    command_file: Path = typer.Argument(..., help="YAML or JSON command file to execute"),
    device: str | None = typer.Option(None, "--device", "-d", help="Device ID"),
    json_out: Path | None = typer.Option(None, "--json", help="Write results as JSON"),
    verbose: bool = typer.Option(False, "--verbose", help="Write debug.log next to the file"),
) -> None:
    """Execute a command file."""
    from actrun.core.config import ConfigLoader, setup_logging
    from actrun.core.device_controller import AdbBackend
    from actrun.core.parser import CommandParser, ParseError

    if not command_file.exists():
        console.print(f"[red]Error:[/red] Command file not found: {command_file}")
        raise typer.Exit(2)

    try:
        commands = CommandParser.parse(command_file)
    except ParseError as e:
        console.print(f"[red]Parse error:[/red] {e}")
        raise typer.Exit(2)

    config = ConfigLoader.load()

    if verbose or config.verbose:
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        log_file = setup_logging(verbose=True, log_dir=command_file.parent / "runs" / timestamp)
        if log_file:
            console.print(f"[dim]Verbose logging → {log_file}[/dim]")

    # CLI option > command file > config
    config.device = device or commands.config.device or config.device
    if not config.device:
        devices_list = AdbBackend.list_devices()
        if not devices_list:
            console.print("[red]Error:[/red] No devices found. Run 'actrun devices' to check.")
            raise typer.Exit(2)
        config.device = devices_list[0]["id"]

    panel_content = f"[dim]File:[/dim]     {command_file}\n"
    panel_content += f"[dim]Device:[/dim]   {config.device}\n"
    panel_content += f"[dim]Commands:[/dim] {len(commands.commands)}"
    console.print(Panel(panel_content, border_style="blue", padding=(0, 1)))

    result = build_runner(config).run_file(commands)

    _print_results(result)

    if json_out:
        json_out.parent.mkdir(parents=True, exist_ok=True)
        json_out.write_text(json.dumps(result.to_dict(), indent=2, default=str))
        console.print(f"[dim]Results → {json_out}[/dim]")

    if result.status == "passed":
        raise typer.Exit(0)
    raise typer.Exit(2 if result.status == "error" else 1)


def _print_results(result: RunResult) -> None:
    """Print per-command results and a summary line."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Action", style="cyan")
    table.add_column("Status")
    table.add_column("Time", justify="right")
    table.add_column("Details")

    for command in result.commands:
        details = command.error or ""
        if command.payload:
            details = json.dumps(command.payload, default=str)
        table.add_row(
            str(command.index),
            command.action,
            STATUS_STYLES.get(command.status, command.status),
            f"{command.duration:.2f}s",
            details,
        )

    console.print(table)
    passed = sum(1 for c in result.commands if c.status == "passed")
    console.print(
        f"{STATUS_STYLES.get(result.status, result.status)}  "
        f"{passed}/{len(result.commands)} commands in {result.duration:.1f}s"
    )


@app.command()
def kinds() -> None:
    """List registered action kinds."""
    from actrun.core.registry import ActionRegistry

    table = Table(title="Action Kinds")
    table.add_column("Kind", style="cyan")
    table.add_column("Handler", style="green")

    for kind in ActionRegistry.kinds():
        table.add_row(kind, repr(ActionRegistry.resolve(kind).handler))

    console.print(table)


@app.command()
def devices() -> None:
    """List connected devices."""
    from actrun.core.device_controller import AdbBackend

    try:
        devices_list = AdbBackend.list_devices()
    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not devices_list:
        console.print("[yellow]No devices found[/yellow]")
        console.print("\nEnsure your device is connected:")
        console.print("  Android: adb devices")
        raise typer.Exit(1)

    table = Table(title="Connected Devices")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Status", style="yellow")

    for device in devices_list:
        table.add_row(
            device.get("id", "unknown"),
            device.get("name", "unknown"),
            device.get("status", "unknown"),
        )

    console.print(table)


if __name__ == "__main__":
    app()

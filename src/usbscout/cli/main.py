"""
USBScout CLI Main Entry Point.

Lists mounted removable storage devices and resolves their display names.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
import humanize
import psutil
from rich.console import Console
from rich.table import Table

from usbscout import __version__
from usbscout.core.config import UsbScoutConfig, load_config
from usbscout.core.logging import OperationLogger, get_logger, setup_logging
from usbscout.core.models import StorageDevice
from usbscout.platform import get_platform_detector
from usbscout.platform.base import StorageDeviceDetector

console = Console()
logger = get_logger(__name__)


def get_detector(ctx: click.Context) -> StorageDeviceDetector:
    """Get or create the platform detector from context."""
    if "detector" not in ctx.obj:
        config: UsbScoutConfig = ctx.obj.get("config") or load_config()
        try:
            ctx.obj["detector"] = get_platform_detector(config.detector)
        except RuntimeError as e:
            console.print(f"[red]{e}[/red]")
            sys.exit(1)
    return ctx.obj["detector"]


def describe_usage(device: StorageDevice) -> tuple[str, str]:
    """Human readable (size, free) for a device, blank if unavailable."""
    try:
        usage = psutil.disk_usage(device.root_path)
    except OSError:
        return "", ""
    return (
        humanize.naturalsize(usage.total, binary=True),
        humanize.naturalsize(usage.free, binary=True),
    )


@click.group()
@click.version_option(version=__version__, prog_name="USBScout")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    json_output: bool,
    verbose: bool,
) -> None:
    """
    USBScout - Removable storage device detection.

    Lists the USB drives mounted on this machine with their volume names
    and serial numbers.
    """
    ctx.ensure_object(dict)

    if config:
        ctx.obj["config"] = UsbScoutConfig.load(config)
    else:
        ctx.obj["config"] = load_config()

    if verbose:
        ctx.obj["config"].logging.level = "DEBUG"

    setup_logging(ctx.obj["config"].logging)
    ctx.obj["json_output"] = json_output


@cli.command("list")
@click.pass_context
def list_devices(ctx: click.Context) -> None:
    """List mounted removable storage devices."""
    detector = get_detector(ctx)
    json_output = ctx.obj.get("json_output", False)

    with OperationLogger("storage device scan", logger, platform=detector.name) as op:
        with console.status("Scanning devices..."):
            devices = detector.get_storage_devices()
        op.update(found=len(devices))

    if json_output:
        click.echo(json.dumps([d.to_dict() for d in devices], indent=2))
        return

    if not devices:
        console.print("[yellow]No removable storage devices found.[/yellow]")
        return

    table = Table(title="Removable Storage Devices")
    table.add_column("Root", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("UUID", style="magenta")
    table.add_column("Size", style="green")
    table.add_column("Free", style="green")
    table.add_column("Access", style="yellow")

    for device in devices:
        size, free = describe_usage(device)
        access = "rw" if device.writable else "ro" if device.readable else ""
        table.add_row(
            device.root_path,
            device.display_name,
            device.uuid or "",
            size,
            free,
            access,
        )

    console.print(table)


@cli.command("name")
@click.argument("root_path")
@click.pass_context
def resolve_name(ctx: click.Context, root_path: str) -> None:
    """Show the display name of a mounted drive, e.g. E:\\."""
    detector = get_detector(ctx)
    name = detector.resolve_name(root_path)

    if name is None:
        console.print(f"[red]No name found for {root_path}[/red]")
        sys.exit(1)

    if ctx.obj.get("json_output", False):
        click.echo(json.dumps({"root_path": root_path, "display_name": name}))
    else:
        click.echo(name)


def main() -> None:
    """Main entry point."""
    try:
        cli(obj={})
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()

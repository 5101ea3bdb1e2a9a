"""logcast CLI - Main entry point."""

import logging
import time
import uuid
from pathlib import Path

import click
from rich.console import Console

from logcast import __version__

console = Console()
logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def _setup_logging(verbose: bool) -> None:
    """Configure the root logger once for CLI use."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(handler)


def _load(config_path: str | None):
    from logcast.config import ConfigError, load_config

    try:
        return load_config(Path(config_path) if config_path else None)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)


@click.group()
@click.version_option(version=__version__, prog_name="logcast")
@click.option("--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """logcast - device log capture for mobile test sessions."""
    _setup_logging(verbose)


@cli.command()
@click.option("--host", default=None, help="Host to bind to")
@click.option("--port", default=None, type=int, help="Port for the HTTP API")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file")
@click.option("--debug", is_flag=True, help="Enable Flask debug mode")
def serve(host, port, config_path, debug):
    """Serve the log capture tools over HTTP."""
    from logcast.capture.operations import LogOperations
    from logcast.web.app import create_app

    config = _load(config_path)
    host = host or config.host
    port = port or config.port

    ops = LogOperations.from_config(config)
    ops.registry.start_dispatcher()
    app = create_app(config, operations=ops)

    console.print("[bold]logcast API[/bold]")
    console.print(f"  URL: http://{host}:{port}/api/v1/tools")
    console.print()

    try:
        app.run(host=host, port=port, debug=debug, use_reloader=False)
    finally:
        ops.shutdown()
        ops.registry.stop_dispatcher()


@cli.command()
@click.argument("platform", type=click.Choice(["android", "ios"]))
@click.option("--session-id", default=None, help="Session id (default: random)")
@click.option("--device-id", default=None, help="Device UDID or serial")
@click.option("--server-url", default=None, help="Automation server URL for device lookup")
@click.option("--interval", default=1.0, type=float, help="Seconds between polls")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file")
def watch(platform, session_id, device_id, server_url, interval, config_path):
    """Capture device logs in-process and print them until interrupted."""
    from logcast.capture.launcher import StartupFailure
    from logcast.capture.operations import LogOperations

    config = _load(config_path)
    ops = LogOperations.from_config(config)
    session_id = session_id or f"watch-{uuid.uuid4().hex[:8]}"

    try:
        result = ops.start(session_id, platform, server_url, device_id)
    except StartupFailure as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    console.print(result.text, style="green", markup=False, highlight=False)

    try:
        while True:
            time.sleep(interval)
            # Events are only applied when an operation drains the registry,
            # so nothing lands in the buffer between this get and clear.
            logs = ops.get(session_id, config.buffer_capacity)
            for line in logs.data.get("lines", []):
                console.print(line, markup=False, highlight=False)
            ops.clear(session_id)
            if logs.data.get("state") not in ("starting", "streaming"):
                console.print(f"[yellow]Capture ended ({logs.data.get('state')})[/yellow]")
                raise SystemExit(1)
    except KeyboardInterrupt:
        pass
    finally:
        result = ops.stop(session_id)
        console.print(result.text, markup=False, highlight=False)


@cli.command()
@click.argument("device_id")
def classify(device_id):
    """Show whether an iOS id is treated as a simulator or a device."""
    from logcast.capture.models import Platform
    from logcast.capture.strategies import classify_ios_device, select_strategy

    target = classify_ios_device(device_id)
    strategy = select_strategy(Platform.IOS, device_id)
    console.print(f"[bold]{device_id}[/bold]: {target.value}")
    console.print(f"  Command: {strategy.display_command(device_id)}", highlight=False)


if __name__ == "__main__":
    cli()

"""kamune-bridge CLI entrypoint.

Command-line interface for supervising the kamune daemon and talking to it
over its stdio protocol.
"""

from __future__ import annotations

import functools
import json
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

if TYPE_CHECKING:
    from kamune_bridge.core.context import BridgeContext
    from kamune_bridge.domain.config import BridgeConfig

from kamune_bridge.core.errors import (
    BridgeCliError,
    invalid_json_params_error,
    invalid_param_error,
)
from kamune_bridge.core.params import parse_params
from kamune_bridge.domain.exceptions import BridgeError
from kamune_bridge.version import __version__


def handle_cli_errors(command_name: str):
    """Decorator to handle common CLI errors.

    Converts bridge exceptions to BridgeCliError (keeping their hint) and
    shows tracebacks for unexpected errors in verbose mode.

    Args:
        command_name: Name of the command for error messages.

    Returns:
        Decorated function with error handling.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except BridgeCliError:
                raise
            except BridgeError as e:
                raise BridgeCliError(e.message, hint=e.hint) from e
            except Exception as e:
                ctx = click.get_current_context()
                if ctx.obj.get("verbose", False):
                    import traceback

                    traceback.print_exc()
                raise BridgeCliError(
                    f"Unexpected error in {command_name}: {e}",
                    hint="Run with --verbose for more details",
                ) from e

        return wrapper

    return decorator


def _load_config(config_path: Path | None) -> BridgeConfig:
    """Load configuration, merging global and local/explicit files."""
    from kamune_bridge.adapters.factory import ConfigFactory

    provider = ConfigFactory().create_config_provider()
    return provider.load(config_path)


def _create_context(ctx: click.Context) -> BridgeContext:
    from kamune_bridge.adapters.factory import ContextFactory

    return ContextFactory(ctx.obj["config"]).create_context(
        resource_dir=ctx.obj.get("resource_dir")
    )


def _build_params(pairs: tuple[str, ...], json_params: str | None) -> dict[str, Any]:
    """Combine --json and -p key=value options (key=value wins)."""
    params: dict[str, Any] = {}
    if json_params:
        try:
            loaded = json.loads(json_params)
        except json.JSONDecodeError as e:
            invalid_json_params_error(str(e))
        if not isinstance(loaded, dict):
            invalid_json_params_error("expected an object")
        params.update(loaded)
    try:
        params.update(parse_params(pairs))
    except ValueError as e:
        invalid_param_error(str(e))
    return params


@click.group()
@click.version_option(version=__version__, prog_name="kamune-bridge")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--quiet", "-q", is_flag=True, help="Only log warnings and errors")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ./kamune-bridge.toml over the global config)",
)
@click.option(
    "--resource-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Bundle resource directory searched first for the daemon binary",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    config_path: Path | None,
    resource_dir: Path | None,
) -> None:
    """Supervise the kamune daemon and exchange commands with it."""
    from kamune_bridge.shared.logging_setup import configure_logging

    ctx.ensure_object(dict)
    config = _load_config(config_path)

    level = config.logging.level
    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "WARNING"
    configure_logging(level, config.logging.file)

    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config"] = config
    ctx.obj["config_path"] = config_path
    ctx.obj["resource_dir"] = resource_dir


@cli.command()
@click.option("--all", "show_all", is_flag=True, help="List every candidate location")
@click.pass_context
@handle_cli_errors("resolve")
def resolve(ctx: click.Context, show_all: bool) -> None:
    """Show which daemon binary would be launched."""
    from kamune_bridge.adapters.daemon.binary import binary_candidates

    context = _create_context(ctx)

    if show_all:
        for path in binary_candidates(
            ctx.obj.get("resource_dir"), binary_name=context.config.daemon.binary_name
        ):
            marker = "✓" if path.is_file() else " "
            click.echo(f"{marker} {path}")
        return

    click.echo(context.bridge.resolve_binary())


@cli.command()
@click.argument("name")
@click.option("--param", "-p", "pairs", multiple=True, help="Parameter as key=value")
@click.option("--json", "json_params", default=None, help="Parameters as a JSON object")
@click.option("--timeout", type=float, default=None, help="Seconds to wait for the reply")
@click.pass_context
@handle_cli_errors("call")
def call(
    ctx: click.Context,
    name: str,
    pairs: tuple[str, ...],
    json_params: str | None,
    timeout: float | None,
) -> None:
    """Start the daemon, send one command and print its reply."""
    params = _build_params(pairs, json_params)

    with _create_context(ctx) as context:
        context.bridge.start()
        event = context.bridge.request(name, params, timeout=timeout)

    click.echo(json.dumps(event.to_dict(), ensure_ascii=False))


@cli.command()
@click.option(
    "--duration", type=float, default=None, help="Stop after this many seconds"
)
@click.pass_context
@handle_cli_errors("listen")
def listen(ctx: click.Context, duration: float | None) -> None:
    """Start the daemon and print its events as JSON lines."""
    from kamune_bridge.adapters.events.broadcast import CATCH_ALL_CHANNEL

    with _create_context(ctx) as context:
        context.emitter.subscribe(
            CATCH_ALL_CHANNEL,
            lambda payload: click.echo(json.dumps(payload, ensure_ascii=False)),
        )
        context.bridge.start()

        deadline = None if duration is None else time.monotonic() + duration
        try:
            while context.bridge.is_running():
                if deadline is not None and time.monotonic() >= deadline:
                    break
                time.sleep(0.1)
        except KeyboardInterrupt:
            pass


@cli.command()
@click.option("--timeout", type=float, default=None, help="Seconds to wait for replies")
@click.option("--no-events", is_flag=True, help="Do not print forwarded events")
@click.option("--no-start", is_flag=True, help="Do not start the daemon on entry")
@click.pass_context
@handle_cli_errors("shell")
def shell(ctx: click.Context, timeout: float | None, no_events: bool, no_start: bool) -> None:
    """Open an interactive shell connected to the daemon."""
    from kamune_bridge.adapters.tui.shell import BridgeShell

    with _create_context(ctx) as context:
        if not no_start:
            context.bridge.start()
        BridgeShell(context, timeout=timeout, show_events=not no_events).run()


@cli.group()
def config() -> None:
    """Manage kamune-bridge configuration."""
    pass


@config.command(name="init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.option("--global", "-g", "use_global", is_flag=True, help="Write the global config")
@click.pass_context
@handle_cli_errors("config init")
def config_init(ctx: click.Context, force: bool, use_global: bool) -> None:
    """Create a config file with documented defaults."""
    from kamune_bridge.adapters.config.toml_config_provider import LOCAL_CONFIG_NAME
    from kamune_bridge.shared.config_io import (
        create_default_config_file,
        get_global_config_path,
    )

    if use_global:
        path = get_global_config_path()
    else:
        path = ctx.obj.get("config_path") or (Path.cwd() / LOCAL_CONFIG_NAME)

    if path.exists() and not force:
        raise BridgeCliError(
            f"Config already exists: {path}",
            hint="Use --force to overwrite it",
        )

    create_default_config_file(path)
    click.echo(f"✓ Created {path}")


@config.command(name="path")
@click.pass_context
def config_path(ctx: click.Context) -> None:
    """Print config file path(s) for use in scripts."""
    from kamune_bridge.adapters.config.toml_config_provider import LOCAL_CONFIG_NAME
    from kamune_bridge.shared.config_io import get_global_config_path

    click.echo(f"global:{get_global_config_path()}")
    click.echo(f"local:{ctx.obj.get('config_path') or (Path.cwd() / LOCAL_CONFIG_NAME)}")


@config.command(name="show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show the effective configuration as TOML."""
    import tomli_w

    from kamune_bridge.shared.config_io import config_to_data

    click.echo(tomli_w.dumps(config_to_data(ctx.obj["config"])), nl=False)


def main() -> int:
    """Main entrypoint for the CLI."""
    try:
        cli(obj={})
        return 0
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())

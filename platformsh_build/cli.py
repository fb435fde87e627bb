"""Thin CLI wrapper for platformsh_build.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console

from platformsh_build import __version__
from platformsh_build.config import get_settings, print_settings_json
from platformsh_build.errors import BuildError
from platformsh_build.logs import BuildLog

app = typer.Typer(
    name="platformsh-build",
    help="Platform.sh build hook - prepare Magento 2 for immutable deployment",
    no_args_is_help=True,
)
console = Console()

# Keys whose values are masked when platform data is printed
SECRET_KEY_MARKERS = ("password", "secret")
MASK = "********"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"platformsh-build version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Platform.sh build hook - prepare Magento 2 for immutable deployment."""


def mask_secrets(value: Any) -> Any:
    """Return a copy of value with credential fields masked."""
    if isinstance(value, dict):
        return {
            key: MASK
            if any(marker in str(key).lower() for marker in SECRET_KEY_MARKERS)
            else mask_secrets(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [mask_secrets(item) for item in value]
    return value


@app.command()
def build() -> None:
    """Invoke the set of steps to build Magento source code for Platform.sh."""
    from platformsh_build.build.service import run_build
    from platformsh_build.environment import Environment

    settings = get_settings()
    env = Environment(root=settings.magento_root)

    with BuildLog(level=settings.log_level) as log:
        try:
            run_build(env, settings)
        except BuildError as e:
            log.info(f"Build failed ({e.code}): {e}")
            raise typer.Exit(code=e.exit_code) from None


@app.command()
def patch(
    patches_dir: Annotated[
        Path | None,
        typer.Argument(help="Directory of patches to apply (default: ./patches)"),
    ] = None,
) -> None:
    """Apply bundled patches in order, then marshal sample data media."""
    from platformsh_build.build.patches import (
        apply_patch_directory,
        marshal_sample_data,
    )
    from platformsh_build.environment import Environment

    settings = get_settings()
    env = Environment(root=settings.magento_root)
    directory = patches_dir or settings.resolve(Path("patches"))

    with BuildLog(level=settings.log_level) as log:
        try:
            apply_patch_directory(env, directory)
            marshal_sample_data(env, settings.magento_root)
        except BuildError as e:
            log.info(f"Patching failed ({e.code}): {e}")
            raise typer.Exit(code=e.exit_code) from None


@app.command("marshal-sample-data")
def marshal_sample_data_cmd() -> None:
    """Copy vendor sample data media into pub/media."""
    from platformsh_build.build.patches import marshal_sample_data
    from platformsh_build.environment import Environment

    settings = get_settings()
    env = Environment(root=settings.magento_root)

    with BuildLog(level=settings.log_level) as log:
        try:
            result = marshal_sample_data(env, settings.magento_root)
        except BuildError as e:
            log.info(f"Marshalling failed ({e.code}): {e}")
            raise typer.Exit(code=e.exit_code) from None
        if result is None:
            log.info("No sample data media found.")
        else:
            log.info(f"Marshalled {len(result.entries)} entries to {result.path}")


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        console.print(print_settings_json(settings))
    else:
        console.print("[bold]Effective Configuration:[/bold]")
        console.print()
        console.print("[bold]Paths:[/bold]")
        console.print(f"  Magento root:        {settings.magento_root}")
        console.print(f"  Options file:        {settings.options_file}")
        console.print(f"  Hotfixes directory:  {settings.hotfixes_dir}")
        console.print(f"  Vendor patch script: {settings.vendor_patch_script}")
        console.print(f"  Init directory:      {settings.init_dir}")
        console.print(f"  Config snapshot:     {settings.config_snapshot_file}")
        console.print(f"  Env snapshot:        {settings.env_snapshot_file}")
        console.print()
        console.print("[bold]Binaries:[/bold]")
        console.print(f"  PHP:                 {settings.php_binary}")
        console.print(f"  Composer:            {settings.composer_binary}")
        console.print()
        console.print("[bold]Operational:[/bold]")
        console.print(f"  Default locale:      {settings.default_locale}")
        console.print(f"  Log level:           {settings.log_level}")


@app.command()
def variables(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show decoded platform variables, routes and relationships.

    Password and secret fields are masked.
    """
    from platformsh_build.environment import Environment

    env = Environment()
    try:
        data = {
            "variables": env.get_variables(),
            "routes": env.get_routes(),
            "relationships": env.get_relationships(),
        }
    except BuildError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=e.exit_code) from None

    if json_output:
        console.print(json.dumps(mask_secrets(data), indent=2, sort_keys=True))
        return

    for section, values in data.items():
        console.print(f"[bold]{section.capitalize()}:[/bold]")
        if not values:
            console.print("  [yellow](none)[/yellow]")
        for key in sorted(values):
            console.print(f"  {key}")
        console.print()


if __name__ == "__main__":
    app()

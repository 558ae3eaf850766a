# src/talosplan/cli/main.py
"""
This module is the main entry point for the talosplan CLI.

It aggregates all commands from the submodules (plan, reconcile, images).
"""

import logging

import typer
from typing_extensions import Annotated

from ..core.config import config
from ..core.size_class import format_size_class, parse_size_class
from . import images, plan, reconcile
from .utils import exit_on_error

# --- Setup Logger ---
logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


app = typer.Typer(
    name="talosplan",
    help="Reconcile Omni cluster configurations into Terraform VM provisioning plans.",
    add_completion=False,
)


def version_callback(value: bool):
    """
    Prints the version of talosplan.
    """
    if value:
        from .. import __version__

        typer.echo(f"talosplan version: {__version__}")
        raise typer.Exit()


@app.command()
def version():
    """
    Show the version of talosplan.
    """
    from .. import __version__

    typer.echo(f"talosplan version: {__version__}")


@app.command(name="size-class")
def size_class(
    descriptor: Annotated[str, typer.Argument(help="CPUxMEMORY descriptor, memory in GB (e.g., 4x8).")],
):
    """
    Resolve a size-class descriptor to CPU cores and memory.
    """
    with exit_on_error("size-class"):
        resolved = parse_size_class(descriptor)
        typer.echo(f"{format_size_class(resolved)}: {resolved.cpu} CPU, {resolved.memory_mb} MB memory")


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
):
    """
    talosplan CLI main entry point.
    """
    pass


# Register commands
app.command(name="plan")(plan.plan)
app.command(name="reconcile")(reconcile.reconcile)
app.add_typer(images.app, name="images")


if __name__ == "__main__":
    app()

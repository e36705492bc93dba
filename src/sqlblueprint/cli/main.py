"""Main CLI entry point for sqlblueprint."""

import click
from .commands.resolve import resolve
from .commands.version import version as version_command
from .. import __version__
from ..utils.logging import set_log_level


@click.group()
@click.version_option(version=__version__, prog_name="sqlblueprint", message="%(prog)s version %(version)s")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log verbosity on stderr (overrides SQLBLUEPRINT_LOG_LEVEL)",
)
def cli(log_level):
    """sqlblueprint - Resolve Cloud SQL configuration into provisioning descriptors."""
    if log_level:
        set_log_level(log_level)


cli.add_command(resolve)
cli.add_command(version_command)

"""Version command - show sqlblueprint version."""

import click
from ... import __version__


@click.command()
def version():
    """Show sqlblueprint version."""
    click.echo(f"sqlblueprint version {__version__}")

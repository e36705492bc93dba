"""Resolve command - turn an instance configuration file into a resource graph."""

import json as jsonlib
import sys
from pathlib import Path
import click
from ...contracts.descriptors import ResolutionResult
from ...ingest.config_loader import load_generated_identities, save_generated_identities
from ...utils.errors import SqlBlueprintError
from ...utils.logging import get_logger
from ..utils import format_error, resolve_file_path

logger = get_logger("cli.resolve")


@click.command()
@click.argument('config_file', type=click.Path(exists=False))
@click.option('--json', 'as_json', is_flag=True, help='Output structured JSON instead of human-readable')
@click.option('--output', '-o', type=click.Path(), help='Save output to file')
@click.option('--state', type=click.Path(), help='Identity state file; read if present, rewritten after resolving')
@click.option('--settings', type=click.Path(), help='Resolver settings YAML (overrides user/project settings)')
@click.option('--quiet', is_flag=True, help='Suppress progress messages')
def resolve(config_file, as_json, output, state, settings, quiet):
    """
    Resolve CONFIG_FILE (YAML or JSON) into ordered resource descriptors.

    Pass --state to keep the generated name suffix and fallback password
    stable between runs.
    """
    from ... import resolve_file

    try:
        try:
            config_path = resolve_file_path(config_file)
        except FileNotFoundError as e:
            click.echo(format_error(str(e)), err=True)
            sys.exit(1)

        if not quiet:
            click.echo(f"Loading configuration: {config_path}", err=True)

        previous = load_generated_identities(state) if state else None
        result = resolve_file(str(config_path), settings_path=settings, previous=previous)

        if state:
            save_generated_identities(result.generated, state)

        if not quiet:
            click.echo(f"Resolved {len(result.resources)} resources", err=True)

        if as_json:
            output_text = _format_json_output(result)
        else:
            from ...presentation.human_formatter import format_human_friendly
            output_text = format_human_friendly(result)

        if output:
            output_path = Path(output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(output_text)
            if not quiet:
                click.echo(f"Output saved to: {output_path}", err=True)
        else:
            click.echo(output_text)

    except SqlBlueprintError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)


def _format_json_output(result: ResolutionResult) -> str:
    """Format ResolutionResult as JSON string."""
    return jsonlib.dumps(result.model_dump(mode="json"), indent=2)

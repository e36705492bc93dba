"""sqlblueprint - Resolve sparse Cloud SQL configuration into an ordered resource graph."""

from typing import Any, Dict, Optional, Union
from .ingest.config_loader import load_instance_config, parse_instance_config
from .ingest.models import InstanceConfig
from .identity.generator import IdentityGenerator
from .resolve.resolver import resolve_config
from .graph.resource_graph import build_resource_graph
from .contracts.descriptors import (
    GeneratedIdentities,
    ResolutionOutputs,
    ResolutionResult,
)
from .resolve.models import ResolvedConfig
from .config import load_settings
from .utils.logging import setup_logging, get_logger
from .utils.errors import SqlBlueprintError

__version__ = "0.1.0"

__all__ = ["resolve", "resolve_file"]

setup_logging()
logger = get_logger("sqlblueprint")


def _build_outputs(resolved: ResolvedConfig) -> ResolutionOutputs:
    instance = resolved.instance
    generated_password = None
    if resolved.enable_default_user and resolved.default_user and resolved.default_user.password_generated:
        generated_password = resolved.default_user.password

    return ResolutionOutputs(
        instance_name=instance.name,
        instance_connection_name=f"{instance.project}:{instance.region}:{instance.name}",
        generated_user_password=generated_password,
        additional_user_names=list(resolved.additional_users),
        iam_user_names=[p.remote_user_name for p in resolved.iam_principals],
    )


def resolve(
    config: Union[InstanceConfig, Dict[str, Any]],
    settings: Optional[Dict[str, Any]] = None,
    generator: Optional[IdentityGenerator] = None,
    previous: Optional[GeneratedIdentities] = None,
) -> ResolutionResult:
    """
    Run one resolution pass.

    Args:
        config: InstanceConfig or raw configuration mapping
        settings: Resolver settings; packaged defaults when None
        generator: Identity generator to use; a fresh one seeded with
            ``previous`` when None
        previous: Identities generated by an earlier pass

    Returns:
        ResolutionResult with descriptors in provisioning order
    """
    try:
        if not isinstance(config, InstanceConfig):
            config = parse_instance_config(config)
        if settings is None:
            settings = load_settings()
        if generator is None:
            identity_settings = settings.get("identity", {})
            generator = IdentityGenerator(
                previous=previous,
                suffix_bytes=identity_settings.get("suffix_bytes", 4),
                secret_bytes=identity_settings.get("secret_bytes", 8),
            )

        logger.info(f"Starting resolution of instance: {config.name}")

        resolved = resolve_config(config, generator, settings)
        graph = build_resource_graph(resolved)

        result = ResolutionResult(
            resources=graph.ordered(),
            outputs=_build_outputs(resolved),
            generated=generator.snapshot(),
        )

        logger.info(f"Resolution complete: {len(result.resources)} resources for {result.outputs.instance_name}")
        return result

    except SqlBlueprintError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during resolution: {e}", exc_info=True)
        raise SqlBlueprintError(f"Resolution failed: {e}") from e


def resolve_file(
    config_path: str,
    settings_path: Optional[str] = None,
    previous: Optional[GeneratedIdentities] = None,
) -> ResolutionResult:
    """Load a configuration file and run one resolution pass."""
    config = load_instance_config(config_path)
    settings = load_settings(settings_path)
    return resolve(config, settings=settings, previous=previous)

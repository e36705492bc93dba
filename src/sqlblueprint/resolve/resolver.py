"""Turn sparse instance configuration into fully-defaulted specs."""

from typing import Any, Dict, Iterable, Optional, TypeVar
from pydantic import BaseModel
from .iam import classify_identities, DEFAULT_PREFIXES, SERVICE_ACCOUNT_SUFFIX
from .models import ResolvedConfig
from ..contracts.descriptors import (
    AuthorizedNetwork,
    BackupPolicy,
    BackupRetention,
    DatabaseFlag,
    DatabaseSpec,
    DependencySentinel,
    InsightsPolicy,
    InstanceSpec,
    LocationPreference,
    MaintenanceWindow,
    NetworkPolicyAbsent,
    NetworkPolicyEnabled,
    StoragePolicy,
    Timeouts,
    UserSpec,
)
from ..identity.generator import IdentityGenerator
from ..ingest.models import BackupConfigurationInput, InstanceConfig
from ..utils.errors import ResolutionError, SqlBlueprintError
from ..utils.logging import get_logger

logger = get_logger("resolve.resolver")

T = TypeVar("T", bound=BaseModel)


def _first_set(*values: Any) -> Any:
    """Explicit value, else default, else None."""
    for value in values:
        if value is not None:
            return value
    return None


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    return value if value else None


def resolve_instance_name(config: InstanceConfig, generator: IdentityGenerator) -> str:
    """Base name, or ``{name}-{suffix}`` when random naming is requested."""
    if config.random_instance_name:
        return f"{config.name}-{generator.generate_suffix()}"
    return config.name


_TRUE_STRINGS = ("true", "yes", "1")
_FALSE_STRINGS = ("false", "no", "0")


def _scalar_str(value: Any, field_name: str) -> Optional[str]:
    """Scalars become strings (YAML reads unquoted ``10`` as an int); anything else is dropped."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    logger.warning(f"Ignoring non-scalar network setting {field_name}: {value!r}")
    return None


def _flag(value: Any, field_name: str) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (str, int)) and str(value).strip().lower() in _TRUE_STRINGS:
        return True
    if isinstance(value, (str, int)) and str(value).strip().lower() in _FALSE_STRINGS:
        return False
    logger.warning(f"Ignoring unrecognized boolean for network setting {field_name}: {value!r}")
    return None


def resolve_network_policy(ip_configuration: Optional[Dict[str, Any]]):
    """Empty map -> absent variant; anything else -> enabled variant."""
    if not ip_configuration:
        return NetworkPolicyAbsent()

    entries = ip_configuration.get("authorized_networks") or []
    if not isinstance(entries, list):
        logger.warning(f"Ignoring authorized_networks that is not a list: {entries!r}")
        entries = []

    networks = []
    for entry in entries:
        value = _scalar_str(entry.get("value"), "authorized_networks.value") if isinstance(entry, dict) else None
        if not value:
            logger.warning(f"Skipping authorized network without a value: {entry}")
            continue
        networks.append(AuthorizedNetwork(
            name=_scalar_str(entry.get("name"), "authorized_networks.name"),
            value=value,
            expiration_time=_scalar_str(entry.get("expiration_time"), "authorized_networks.expiration_time"),
        ))

    return NetworkPolicyEnabled(
        ipv4_enabled=_flag(ip_configuration.get("ipv4_enabled"), "ipv4_enabled"),
        private_network=_scalar_str(ip_configuration.get("private_network"), "private_network"),
        ssl_mode=_scalar_str(ip_configuration.get("ssl_mode"), "ssl_mode"),
        allocated_ip_range=_scalar_str(ip_configuration.get("allocated_ip_range"), "allocated_ip_range"),
        authorized_networks=networks,
    )


def resolve_backup_policy(backup: BackupConfigurationInput) -> BackupPolicy:
    """Copy backup settings; the retention sub-block exists only if one of its values is set."""
    retained_backups = backup.retained_backups
    retention_unit = backup.retention_unit

    retention = None
    if retained_backups is not None or retention_unit is not None:
        retention = BackupRetention(retained_backups=retained_backups, retention_unit=retention_unit)

    return BackupPolicy(
        enabled=backup.enabled,
        start_time=backup.start_time,
        location=backup.location,
        point_in_time_recovery_enabled=bool(backup.point_in_time_recovery_enabled),
        transaction_log_retention_days=backup.transaction_log_retention_days,
        retention=retention,
    )


def resolve_insights_policy(config: InstanceConfig, defaults: Dict[str, Any]) -> InsightsPolicy:
    overrides = config.insights_config
    return InsightsPolicy(
        query_string_length=_first_set(
            overrides.query_string_length if overrides else None,
            defaults.get("query_string_length"),
            1024,
        ),
        record_application_tags=_first_set(
            overrides.record_application_tags if overrides else None,
            defaults.get("record_application_tags"),
            True,
        ),
        record_client_address=_first_set(
            overrides.record_client_address if overrides else None,
            defaults.get("record_client_address"),
            True,
        ),
    )


def _location_preference(config: InstanceConfig) -> Optional[LocationPreference]:
    if config.zone is None and config.secondary_zone is None and config.follow_gae_application is None:
        return None
    return LocationPreference(
        zone=config.zone,
        secondary_zone=config.secondary_zone,
        follow_gae_application=config.follow_gae_application,
    )


def keyed_by_name(entries: Iterable[T], collection: str) -> Dict[str, T]:
    """
    Reduce an ordered list to a name-keyed dict.

    Entries are inserted in order, so the last entry for a given name wins
    while the key keeps the position of its first appearance.
    """
    result: Dict[str, T] = {}
    for entry in entries:
        if entry.name in result:
            logger.warning(f"Duplicate name '{entry.name}' in {collection}, keeping the later entry")
        result[entry.name] = entry
    return result


def resolve_instance(config: InstanceConfig, name: str, settings: Dict[str, Any]) -> InstanceSpec:
    timeouts = settings.get("timeouts", {})
    return InstanceSpec(
        name=name,
        project=config.project_id,
        database_version=config.database_version,
        region=config.region,
        tier=config.tier,
        edition=config.edition,
        activation_policy=config.activation_policy,
        availability_type=config.availability_type,
        encryption_key_name=config.encryption_key_name,
        deletion_protection=config.deletion_protection,
        deletion_protection_enabled=config.deletion_protection_enabled,
        root_password=_blank_to_none(config.root_password),
        backup=resolve_backup_policy(config.backup_configuration),
        network=resolve_network_policy(config.ip_configuration),
        insights=resolve_insights_policy(config, settings.get("insights", {})),
        storage=StoragePolicy(
            disk_autoresize=config.disk_autoresize,
            disk_autoresize_limit=config.disk_autoresize_limit,
            disk_size=config.disk_size,
            disk_type=config.disk_type,
            pricing_plan=config.pricing_plan,
        ),
        maintenance_window=MaintenanceWindow(
            day=config.maintenance_window_day,
            hour=config.maintenance_window_hour,
            update_track=config.maintenance_window_update_track,
        ),
        location_preference=_location_preference(config),
        database_flags=[DatabaseFlag(name=f.name, value=f.value) for f in config.database_flags],
        user_labels=dict(config.user_labels),
        timeouts=Timeouts(
            create=_first_set(config.create_timeout, timeouts.get("create"), "30m"),
            update=_first_set(config.update_timeout, timeouts.get("update"), "30m"),
            delete=_first_set(config.delete_timeout, timeouts.get("delete"), "30m"),
        ),
    )


def resolve_config(
    config: InstanceConfig,
    generator: IdentityGenerator,
    settings: Optional[Dict[str, Any]] = None,
) -> ResolvedConfig:
    """
    Resolve one configuration into fully-defaulted specs.

    Pure apart from the generator, which memoizes its values, so every spec
    produced here sees the same suffix and fallback secret.

    Args:
        config: Validated instance configuration
        generator: Identity generator for this pass
        settings: Resolver settings (see config/defaults.yaml)

    Returns:
        ResolvedConfig ready for the graph builder

    Raises:
        IdentityGenerationError: If the entropy source fails
        ResolutionError: If resolution fails unexpectedly
    """
    try:
        return _resolve(config, generator, settings or {})
    except SqlBlueprintError:
        raise
    except Exception as e:
        raise ResolutionError(f"Failed to resolve configuration for {config.name}: {e}") from e


def _resolve(config: InstanceConfig, generator: IdentityGenerator, settings: Dict[str, Any]) -> ResolvedConfig:
    iam_settings = settings.get("iam", {})

    name = resolve_instance_name(config, generator)
    instance = resolve_instance(config, name, settings)
    project = config.project_id

    def password_or_fallback(password: Optional[str]):
        if password:
            return password, False
        return generator.generate_fallback_secret(keyed_by=name), True

    default_database = DatabaseSpec(
        name=config.db_name,
        instance=name,
        project=project,
        charset=_blank_to_none(config.db_charset),
        collation=_blank_to_none(config.db_collation),
    )

    additional_databases = {
        db_name: DatabaseSpec(
            name=db_name,
            instance=name,
            project=project,
            charset=_blank_to_none(entry.charset),
            collation=_blank_to_none(entry.collation),
        )
        for db_name, entry in keyed_by_name(config.additional_databases, "additional_databases").items()
    }

    default_user = None
    if config.enable_default_user:
        password, generated = password_or_fallback(config.user_password)
        default_user = UserSpec(
            name=config.user_name,
            instance=name,
            project=project,
            password=password,
            password_generated=generated,
        )

    additional_users = {}
    for user_name, entry in keyed_by_name(config.additional_users, "additional_users").items():
        password, generated = password_or_fallback(entry.password)
        additional_users[user_name] = UserSpec(
            name=user_name,
            instance=name,
            project=project,
            password=password,
            password_generated=generated,
        )

    principals = classify_identities(
        config.iam_user_emails,
        prefixes=iam_settings.get("prefixes") or DEFAULT_PREFIXES,
        service_account_suffix=iam_settings.get("service_account_suffix", SERVICE_ACCOUNT_SUFFIX),
    )

    logger.info(
        f"Resolved instance {name}: {len(additional_databases)} additional databases, "
        f"{len(additional_users)} additional users, {len(principals)} IAM principals"
    )

    return ResolvedConfig(
        instance=instance,
        sentinel=DependencySentinel(trigger=len(config.module_depends_on)),
        enable_default_db=config.enable_default_db,
        default_database=default_database,
        additional_databases=additional_databases,
        enable_default_user=config.enable_default_user,
        default_user=default_user,
        additional_users=additional_users,
        iam_principals=principals,
        iam_role=iam_settings.get("role", "roles/cloudsql.instanceUser"),
    )

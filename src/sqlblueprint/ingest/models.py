"""Pydantic models for raw instance configuration (the caller-facing input)."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ValidationInfo, field_validator


class BackupConfigurationInput(BaseModel):
    """Backup settings as supplied; every field is optional."""
    enabled: bool = Field(default=False)
    start_time: Optional[str] = Field(None)
    location: Optional[str] = Field(None)
    point_in_time_recovery_enabled: bool = Field(default=False)
    transaction_log_retention_days: Optional[int] = Field(None)
    retained_backups: Optional[int] = Field(None)
    retention_unit: Optional[str] = Field(None)

    @field_validator("enabled", "point_in_time_recovery_enabled", mode="before")
    @classmethod
    def _null_flag_is_false(cls, value):
        return False if value is None else value


class InsightsConfigInput(BaseModel):
    """Query insights overrides; unset values fall back to resolver settings."""
    query_string_length: Optional[int] = Field(None)
    record_application_tags: Optional[bool] = Field(None)
    record_client_address: Optional[bool] = Field(None)


class DatabaseFlagInput(BaseModel):
    name: str
    value: str


class AdditionalDatabase(BaseModel):
    name: str = Field(..., description="Database name (collection key)")
    charset: Optional[str] = Field(None)
    collation: Optional[str] = Field(None)


class AdditionalUser(BaseModel):
    name: str = Field(..., description="User name (collection key)")
    password: Optional[str] = Field(None, description="Falls back to the generated secret when unset")


class InstanceConfig(BaseModel):
    """Sparse configuration for one database instance and its children."""

    # Identity
    project_id: str = Field(..., description="Project to create the instance in")
    name: str = Field(..., description="Instance name, or base name when random_instance_name is set")
    random_instance_name: bool = Field(default=False, description="Append a random 4-byte hex suffix to name")

    # Engine and topology
    database_version: str = Field(..., description="Engine version, e.g. POSTGRES_15")
    region: str = Field(default="us-central1")
    tier: str = Field(default="db-f1-micro")
    edition: Optional[str] = Field(None, description="ENTERPRISE or ENTERPRISE_PLUS")
    zone: Optional[str] = Field(None)
    secondary_zone: Optional[str] = Field(None)
    follow_gae_application: Optional[str] = Field(None)
    activation_policy: str = Field(default="ALWAYS")
    availability_type: str = Field(default="ZONAL")

    # Protection and encryption
    deletion_protection: bool = Field(default=True)
    deletion_protection_enabled: bool = Field(default=False)
    encryption_key_name: Optional[str] = Field(None)
    root_password: Optional[str] = Field(None)

    # Storage
    disk_autoresize: bool = Field(default=True)
    disk_autoresize_limit: int = Field(default=0, ge=0)
    disk_size: int = Field(default=10, ge=0)
    disk_type: str = Field(default="PD_SSD")
    pricing_plan: str = Field(default="PER_USE")

    # Maintenance
    maintenance_window_day: int = Field(default=1, ge=1, le=7)
    maintenance_window_hour: int = Field(default=23, ge=0, le=23)
    maintenance_window_update_track: str = Field(default="canary")

    database_flags: List[DatabaseFlagInput] = Field(default_factory=list)
    user_labels: Dict[str, str] = Field(default_factory=dict)

    # Policies
    backup_configuration: BackupConfigurationInput = Field(default_factory=BackupConfigurationInput)
    insights_config: Optional[InsightsConfigInput] = Field(None)
    ip_configuration: Dict[str, Any] = Field(default_factory=dict, description="Empty map means no network block")

    # Default database and user
    enable_default_db: bool = Field(default=True)
    db_name: str = Field(default="default")
    db_charset: str = Field(default="")
    db_collation: str = Field(default="")
    enable_default_user: bool = Field(default=True)
    user_name: str = Field(default="default")
    user_password: str = Field(default="", description="Empty string means use the generated secret")

    # Collections
    additional_databases: List[AdditionalDatabase] = Field(default_factory=list)
    additional_users: List[AdditionalUser] = Field(default_factory=list)
    iam_user_emails: List[str] = Field(default_factory=list)

    # Lifecycle
    create_timeout: Optional[str] = Field(None)
    update_timeout: Optional[str] = Field(None)
    delete_timeout: Optional[str] = Field(None)
    module_depends_on: List[Any] = Field(default_factory=list, description="Opaque caller preconditions")

    @field_validator(
        "ip_configuration",
        "backup_configuration",
        "db_charset",
        "db_collation",
        "user_password",
        "additional_databases",
        "additional_users",
        "iam_user_emails",
        "database_flags",
        "user_labels",
        "module_depends_on",
        mode="before",
    )
    @classmethod
    def _null_means_default(cls, value, info: ValidationInfo):
        """A null optional input (e.g. a bare ``ip_configuration:`` key) takes the field default."""
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value

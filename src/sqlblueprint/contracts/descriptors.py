"""Pydantic models for resolved resource descriptors (the engine-facing contract)."""

from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, model_serializer


class FieldPolicy(str, Enum):
    """Per-field reconciliation policy."""
    ENFORCE = "enforce"
    IGNORE_DRIFT = "ignore_drift"


class ResourceType(str, Enum):
    """Resource types emitted by the graph builder."""
    DEPENDENCY_SENTINEL = "dependency_sentinel"
    SQL_DATABASE_INSTANCE = "google_sql_database_instance"
    SQL_DATABASE = "google_sql_database"
    SQL_USER = "google_sql_user"
    PROJECT_IAM_MEMBER = "google_project_iam_member"


class IamPrincipalKind(str, Enum):
    """Database-level IAM principal kinds."""
    CLOUD_IAM_SERVICE_ACCOUNT = "CLOUD_IAM_SERVICE_ACCOUNT"
    CLOUD_IAM_GROUP = "CLOUD_IAM_GROUP"
    CLOUD_IAM_USER = "CLOUD_IAM_USER"


MEMBER_PREFIXES = {
    IamPrincipalKind.CLOUD_IAM_SERVICE_ACCOUNT: "serviceAccount",
    IamPrincipalKind.CLOUD_IAM_GROUP: "group",
    IamPrincipalKind.CLOUD_IAM_USER: "user",
}


class BackupRetention(BaseModel):
    """Retained-backups sub-block; only built when one of its values is set."""
    retained_backups: Optional[int] = Field(None, description="Number of backups to retain")
    retention_unit: Optional[str] = Field(None, description="Unit for retained_backups (e.g. COUNT)")


class BackupPolicy(BaseModel):
    """Resolved backup configuration."""
    enabled: bool = Field(default=False)
    start_time: Optional[str] = Field(None, description="HH:MM start time of the backup window")
    location: Optional[str] = Field(None)
    point_in_time_recovery_enabled: bool = Field(default=False)
    transaction_log_retention_days: Optional[int] = Field(None)
    retention: Optional[BackupRetention] = Field(None, description="Omitted entirely when absent")

    @model_serializer(mode="wrap")
    def _omit_absent_retention(self, handler):
        data = handler(self)
        if self.retention is None:
            data.pop("retention", None)
        return data


class AuthorizedNetwork(BaseModel):
    """Single authorized network entry."""
    name: Optional[str] = Field(None)
    value: str = Field(..., description="CIDR range")
    expiration_time: Optional[str] = Field(None)


class NetworkPolicyAbsent(BaseModel):
    """No network block is emitted for the instance."""
    mode: Literal["absent"] = "absent"

    @property
    def enabled(self) -> bool:
        return False


class NetworkPolicyEnabled(BaseModel):
    """Network block passed through from the caller's map."""
    mode: Literal["enabled"] = "enabled"
    ipv4_enabled: Optional[bool] = Field(None)
    private_network: Optional[str] = Field(None, description="Self link of the VPC network")
    ssl_mode: Optional[str] = Field(None)
    allocated_ip_range: Optional[str] = Field(None)
    authorized_networks: List[AuthorizedNetwork] = Field(default_factory=list)

    @property
    def enabled(self) -> bool:
        return True


NetworkPolicy = Annotated[
    Union[NetworkPolicyAbsent, NetworkPolicyEnabled],
    Field(discriminator="mode"),
]


class InsightsPolicy(BaseModel):
    """Query insights settings; enablement itself is always on."""
    query_insights_enabled: Literal[True] = True
    query_string_length: int = Field(default=1024, ge=0)
    record_application_tags: bool = Field(default=True)
    record_client_address: bool = Field(default=True)


class StoragePolicy(BaseModel):
    """Disk and pricing settings."""
    disk_autoresize: bool = Field(default=True)
    disk_autoresize_limit: int = Field(default=0, ge=0)
    disk_size: int = Field(default=10, ge=0)
    disk_type: str = Field(default="PD_SSD")
    pricing_plan: str = Field(default="PER_USE")


class MaintenanceWindow(BaseModel):
    day: int = Field(default=1, ge=1, le=7)
    hour: int = Field(default=23, ge=0, le=23)
    update_track: str = Field(default="canary")


class LocationPreference(BaseModel):
    zone: Optional[str] = None
    secondary_zone: Optional[str] = None
    follow_gae_application: Optional[str] = None


class DatabaseFlag(BaseModel):
    name: str
    value: str


class Timeouts(BaseModel):
    """Lifecycle timeouts, interpreted only by the provisioning engine."""
    create: str = Field(default="30m")
    update: str = Field(default="30m")
    delete: str = Field(default="30m")


class InstanceSpec(BaseModel):
    """Desired state of the database instance."""
    name: str = Field(..., description="Resolved instance name")
    project: str = Field(..., description="Project that owns the instance")
    database_version: str = Field(..., description="Engine version, e.g. POSTGRES_15")
    region: str = Field(...)
    tier: str = Field(...)
    edition: Optional[str] = Field(None)
    activation_policy: str = Field(default="ALWAYS")
    availability_type: str = Field(default="ZONAL")
    encryption_key_name: Optional[str] = Field(None)
    deletion_protection: bool = Field(default=True, description="Engine-side guard against destroy")
    deletion_protection_enabled: bool = Field(default=False, description="API-side deletion protection")
    root_password: Optional[str] = Field(None)
    backup: BackupPolicy = Field(default_factory=BackupPolicy)
    network: NetworkPolicy = Field(default_factory=NetworkPolicyAbsent)
    insights: InsightsPolicy = Field(default_factory=InsightsPolicy)
    storage: StoragePolicy = Field(default_factory=StoragePolicy)
    maintenance_window: MaintenanceWindow = Field(default_factory=MaintenanceWindow)
    location_preference: Optional[LocationPreference] = Field(None)
    database_flags: List[DatabaseFlag] = Field(default_factory=list)
    user_labels: Dict[str, str] = Field(default_factory=dict)
    timeouts: Timeouts = Field(default_factory=Timeouts)

    @model_serializer(mode="wrap")
    def _omit_absent_blocks(self, handler):
        data = handler(self)
        if not self.network.enabled:
            data.pop("network", None)
        if self.location_preference is None:
            data.pop("location_preference", None)
        return data


class DatabaseSpec(BaseModel):
    name: str
    instance: str
    project: str
    charset: Optional[str] = None
    collation: Optional[str] = None


class UserSpec(BaseModel):
    """Built-in (password) database user."""
    name: str
    instance: str
    project: str
    password: Optional[str] = None
    password_generated: bool = Field(default=False, description="Password came from the fallback secret")


class IamPrincipal(BaseModel):
    """IAM identity classified for database-level access."""
    raw: str = Field(..., description="Identity string as supplied")
    kind: IamPrincipalKind
    identity: str = Field(..., description="Identity with any prefix stripped")
    remote_user_name: str = Field(..., description="Name of the database user created for the principal")

    model_config = ConfigDict(use_enum_values=True)

    @property
    def key(self) -> str:
        return f"{self.identity} {self.kind}"

    @property
    def member(self) -> str:
        return f"{MEMBER_PREFIXES[IamPrincipalKind(self.kind)]}:{self.identity}"


class IamMembershipSpec(BaseModel):
    """Project-level role grant for one IAM principal."""
    project: str
    role: str
    member: str


class IamUserSpec(BaseModel):
    """Database user bound to an IAM principal."""
    name: str
    instance: str
    project: str
    type: IamPrincipalKind

    model_config = ConfigDict(use_enum_values=True)


class DependencySentinel(BaseModel):
    """Opaque barrier standing in for caller-supplied preconditions."""
    trigger: int = Field(..., ge=0, description="Length of the precondition list")


ResourceSpec = Union[
    DependencySentinel,
    InstanceSpec,
    DatabaseSpec,
    UserSpec,
    IamMembershipSpec,
    IamUserSpec,
]


class ResourceDescriptor(BaseModel):
    """One resource's resolved desired state plus graph metadata."""
    address: str = Field(..., description="Unique resource address")
    type: ResourceType = Field(...)
    spec: ResourceSpec = Field(...)
    depends_on: List[str] = Field(default_factory=list, description="Addresses this resource depends on")
    field_policies: Dict[str, FieldPolicy] = Field(
        default_factory=dict, description="Fields whose remote drift must be ignored"
    )

    model_config = ConfigDict(use_enum_values=True)

    def policy_for(self, field_name: str) -> FieldPolicy:
        """Reconciliation policy for a field (enforce unless exempted)."""
        return FieldPolicy(self.field_policies.get(field_name, FieldPolicy.ENFORCE))


class GeneratedIdentities(BaseModel):
    """Generated values persisted between resolution passes."""
    suffix: Optional[str] = None
    fallback_secret: Optional[str] = None
    fallback_secret_keeper: Optional[str] = Field(None, description="Instance name the secret is keyed by")


class ResolutionOutputs(BaseModel):
    instance_name: str
    instance_connection_name: str
    generated_user_password: Optional[str] = None
    additional_user_names: List[str] = Field(default_factory=list)
    iam_user_names: List[str] = Field(default_factory=list)


class ResolutionResult(BaseModel):
    """Output contract - versioned, ordered, complete."""
    version: str = Field(default="1.0.0", description="Output contract version")
    resources: List[ResourceDescriptor] = Field(default_factory=list, description="Descriptors in provisioning order")
    outputs: ResolutionOutputs
    generated: GeneratedIdentities = Field(default_factory=GeneratedIdentities)

    def get(self, address: str) -> Optional[ResourceDescriptor]:
        for resource in self.resources:
            if resource.address == address:
                return resource
        return None

    def of_type(self, resource_type: ResourceType) -> List[ResourceDescriptor]:
        wanted = ResourceType(resource_type).value
        return [r for r in self.resources if r.type == wanted]

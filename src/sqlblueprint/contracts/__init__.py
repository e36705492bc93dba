from .descriptors import (
    FieldPolicy,
    ResourceType,
    IamPrincipalKind,
    BackupPolicy,
    BackupRetention,
    NetworkPolicyAbsent,
    NetworkPolicyEnabled,
    InstanceSpec,
    DatabaseSpec,
    UserSpec,
    IamPrincipal,
    IamMembershipSpec,
    IamUserSpec,
    DependencySentinel,
    ResourceDescriptor,
    GeneratedIdentities,
    ResolutionOutputs,
    ResolutionResult,
)

__all__ = [
    "FieldPolicy",
    "ResourceType",
    "IamPrincipalKind",
    "BackupPolicy",
    "BackupRetention",
    "NetworkPolicyAbsent",
    "NetworkPolicyEnabled",
    "InstanceSpec",
    "DatabaseSpec",
    "UserSpec",
    "IamPrincipal",
    "IamMembershipSpec",
    "IamUserSpec",
    "DependencySentinel",
    "ResourceDescriptor",
    "GeneratedIdentities",
    "ResolutionOutputs",
    "ResolutionResult",
]

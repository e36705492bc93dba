"""Intermediate model handed from the resolver to the graph builder."""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from ..contracts.descriptors import (
    DatabaseSpec,
    DependencySentinel,
    IamPrincipal,
    InstanceSpec,
    UserSpec,
)


class ResolvedConfig(BaseModel):
    """Fully-defaulted configuration for one resolution pass."""
    instance: InstanceSpec
    sentinel: DependencySentinel
    enable_default_db: bool = True
    default_database: DatabaseSpec
    additional_databases: Dict[str, DatabaseSpec] = Field(default_factory=dict)
    enable_default_user: bool = True
    default_user: Optional[UserSpec] = Field(None, description="Only resolved when enable_default_user is set")
    additional_users: Dict[str, UserSpec] = Field(default_factory=dict)
    iam_principals: List[IamPrincipal] = Field(default_factory=list)
    iam_role: str = Field(default="roles/cloudsql.instanceUser")

"""Build the directed resource graph from resolved configuration."""

import networkx as nx
from typing import Dict, List, Optional, Set
from ..contracts.descriptors import (
    FieldPolicy,
    IamMembershipSpec,
    IamUserSpec,
    ResourceDescriptor,
    ResourceSpec,
    ResourceType,
)
from ..resolve.models import ResolvedConfig
from ..utils.errors import GraphConstructionError
from ..utils.logging import get_logger

logger = get_logger("graph.resource_graph")

SENTINEL_ADDRESS = "dependency_sentinel.module_depends_on"
INSTANCE_ADDRESS = "google_sql_database_instance.default"

INSTANCE_IGNORED_FIELDS = ["storage.disk_size"]
USER_IGNORED_FIELDS = ["password"]


def _address(resource_type: ResourceType, name: str, key: Optional[str] = None) -> str:
    if key is None:
        return f"{resource_type.value}.{name}"
    return f'{resource_type.value}.{name}["{key}"]'


class ResourceGraph:
    """Directed resource graph: nodes=descriptors, edges point from dependent to dependency."""

    def __init__(self):
        self.graph = nx.DiGraph()
        self._descriptors: Dict[str, ResourceDescriptor] = {}
        self._rank: Dict[str, int] = {}

    def add_descriptor(self, descriptor: ResourceDescriptor) -> None:
        """Add a descriptor; every dependency must already be in the graph."""
        address = descriptor.address
        if address in self._descriptors:
            raise GraphConstructionError(f"Duplicate resource address: {address}")

        missing = [dep for dep in descriptor.depends_on if dep not in self._descriptors]
        if missing:
            raise GraphConstructionError(f"{address} depends on unknown resources: {missing}")

        self.graph.add_node(address, descriptor=descriptor)
        self._descriptors[address] = descriptor
        self._rank[address] = len(self._rank)

        for dep_address in descriptor.depends_on:
            self.graph.add_edge(address, dep_address)
            logger.debug(f"Added dependency edge: {address} -> {dep_address}")

    def add(
        self,
        resource_type: ResourceType,
        address: str,
        spec: ResourceSpec,
        depends_on: List[str],
        ignored_fields: Optional[List[str]] = None,
    ) -> ResourceDescriptor:
        descriptor = ResourceDescriptor(
            address=address,
            type=resource_type,
            spec=spec,
            depends_on=depends_on,
            field_policies={f: FieldPolicy.IGNORE_DRIFT for f in ignored_fields or []},
        )
        self.add_descriptor(descriptor)
        return descriptor

    def get_descriptor(self, address: str) -> Optional[ResourceDescriptor]:
        return self._descriptors.get(address)

    def get_dependencies(self, address: str) -> Set[str]:
        """All resources the given resource depends on, directly or transitively."""
        if address not in self.graph:
            return set()
        return set(nx.descendants(self.graph, address))

    def get_dependents(self, address: str) -> Set[str]:
        """All resources that depend on the given resource, directly or transitively."""
        if address not in self.graph:
            return set()
        return set(nx.ancestors(self.graph, address))

    def ordered(self) -> List[ResourceDescriptor]:
        """
        Descriptors in provisioning order.

        Dependencies always precede dependents; independent resources keep
        the order in which they were added.
        """
        if not nx.is_directed_acyclic_graph(self.graph):
            cycle = nx.find_cycle(self.graph)
            raise GraphConstructionError(f"Resource graph contains a cycle: {cycle}")

        creation_order = nx.lexicographical_topological_sort(
            self.graph.reverse(copy=False), key=lambda address: self._rank[address]
        )
        return [self._descriptors[address] for address in creation_order]

    def __len__(self) -> int:
        return len(self._descriptors)


def build_resource_graph(resolved: ResolvedConfig) -> ResourceGraph:
    """
    Assemble descriptors for one resolved configuration.

    Order: sentinel, instance, databases, users, then an IAM grant followed by
    its bound database user for each principal.

    Raises:
        GraphConstructionError: If the graph cannot be built
    """
    graph = ResourceGraph()
    try:
        graph.add(ResourceType.DEPENDENCY_SENTINEL, SENTINEL_ADDRESS, resolved.sentinel, [])
        graph.add(
            ResourceType.SQL_DATABASE_INSTANCE,
            INSTANCE_ADDRESS,
            resolved.instance,
            [SENTINEL_ADDRESS],
            ignored_fields=INSTANCE_IGNORED_FIELDS,
        )
        child_deps = [SENTINEL_ADDRESS, INSTANCE_ADDRESS]

        if resolved.enable_default_db:
            graph.add(
                ResourceType.SQL_DATABASE,
                _address(ResourceType.SQL_DATABASE, "default"),
                resolved.default_database,
                list(child_deps),
            )
        for name, database in resolved.additional_databases.items():
            graph.add(
                ResourceType.SQL_DATABASE,
                _address(ResourceType.SQL_DATABASE, "additional_databases", name),
                database,
                list(child_deps),
            )

        if resolved.enable_default_user and resolved.default_user is not None:
            graph.add(
                ResourceType.SQL_USER,
                _address(ResourceType.SQL_USER, "default"),
                resolved.default_user,
                list(child_deps),
                ignored_fields=USER_IGNORED_FIELDS,
            )
        for name, user in resolved.additional_users.items():
            graph.add(
                ResourceType.SQL_USER,
                _address(ResourceType.SQL_USER, "additional_users", name),
                user,
                list(child_deps),
                ignored_fields=USER_IGNORED_FIELDS,
            )

        for principal in resolved.iam_principals:
            grant_address = _address(ResourceType.PROJECT_IAM_MEMBER, "iam_binding", principal.key)
            graph.add(
                ResourceType.PROJECT_IAM_MEMBER,
                grant_address,
                IamMembershipSpec(
                    project=resolved.instance.project,
                    role=resolved.iam_role,
                    member=principal.member,
                ),
                [SENTINEL_ADDRESS],
            )
            # Database-level IAM users are rejected until the project-level grant exists.
            graph.add(
                ResourceType.SQL_USER,
                _address(ResourceType.SQL_USER, "iam_account", principal.key),
                IamUserSpec(
                    name=principal.remote_user_name,
                    instance=resolved.instance.name,
                    project=resolved.instance.project,
                    type=principal.kind,
                ),
                child_deps + [grant_address],
            )
    except GraphConstructionError:
        raise
    except Exception as e:
        raise GraphConstructionError(f"Failed to build resource graph: {e}")

    logger.info(
        f"Built resource graph with {graph.graph.number_of_nodes()} nodes "
        f"and {graph.graph.number_of_edges()} edges"
    )
    return graph

"""
Dependency Graph for Schema Changes

Directed acyclic graph over schema changes, built with NetworkX. An edge
``a -> b`` means change ``a`` must be applied before change ``b`` (a foreign
key must be dropped before its table, a table must exist before a foreign
key points at it).

Key features:
- Cycle detection with readable paths
- Lexicographic topological sort keyed by change phase, then by the order
  the differ discovered the change, so output is deterministic
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import networkx as nx

from ddlforge.exceptions import CircularDependencyError

from .changes import SchemaChange


class DependencyType(StrEnum):
    """Why one change has to wait for another"""

    TABLE_EXISTS = "table_exists"  # Target table must be created first
    COLUMN_EXISTS = "column_exists"  # Column must be added or retyped first
    KEY_EXISTS = "key_exists"  # Referenced primary key must be in place
    RELEASE_REFERENCE = "release_reference"  # Foreign key must go before its endpoint
    RELEASE_INDEX = "release_index"  # Index must go before its column
    RELEASE_KEY = "release_key"  # Primary key must go before its column
    REPLACE = "replace"  # Drop of an object before re-adding it under the same name
    COLUMN_ORDERING = "column_ordering"  # Type change before null/default change


@dataclass
class DependencyNode:
    """Node in the dependency graph"""

    id: str  # Change id, e.g. "add_column:users.email"
    change: SchemaChange
    phase: int
    sequence: int  # Order in which the differ produced the change


@dataclass
class DependencyEdge:
    """Edge in the dependency graph"""

    from_id: str  # Dependent change
    to_id: str  # Change it waits for
    dep_type: DependencyType


class DependencyGraph:
    """Directed acyclic graph of schema changes using NetworkX"""

    def __init__(self) -> None:
        self.graph: nx.DiGraph = nx.DiGraph()
        self.nodes: dict[str, DependencyNode] = {}
        self.metadata: dict[str, Any] = {}

    def add_change(self, change: SchemaChange) -> DependencyNode:
        """Add a change as a node, keeping insertion order as its sequence"""
        node = DependencyNode(
            id=change.id, change=change, phase=change.phase, sequence=len(self.nodes)
        )
        self.add_node(node)
        return node

    def add_node(self, node: DependencyNode) -> None:
        if node.id in self.nodes:
            raise ValueError(f"Node {node.id} already exists in graph")

        self.nodes[node.id] = node
        self.graph.add_node(node.id, phase=node.phase, sequence=node.sequence)

    def add_edge(self, from_id: str, to_id: str, dep_type: DependencyType) -> None:
        """
        Add an edge: ``from_id`` must be applied BEFORE ``to_id``

        Args:
            from_id: Change that has to come first
            to_id: Change that depends on it
            dep_type: Reason for the ordering
        """
        if from_id not in self.nodes:
            raise ValueError(f"Source node {from_id} not in graph")
        if to_id not in self.nodes:
            raise ValueError(f"Target node {to_id} not in graph")
        if from_id == to_id:
            return

        self.graph.add_edge(from_id, to_id, dep_type=dep_type.value)

    def get_node(self, node_id: str) -> DependencyNode | None:
        return self.nodes.get(node_id)

    def get_dependencies(self, node_id: str) -> list[DependencyEdge]:
        """What must run before ``node_id`` (incoming edges)"""
        if node_id not in self.graph:
            return []

        return [
            DependencyEdge(
                from_id=node_id,
                to_id=predecessor,
                dep_type=DependencyType(self.graph[predecessor][node_id]["dep_type"]),
            )
            for predecessor in self.graph.predecessors(node_id)
        ]

    def get_dependents(self, node_id: str) -> list[str]:
        """What waits for ``node_id`` (outgoing edges)"""
        if node_id not in self.graph:
            return []
        return list(self.graph.successors(node_id))

    def detect_cycles(self) -> list[list[str]]:
        return [list(cycle) for cycle in nx.simple_cycles(self.graph)]

    def topological_sort(self) -> list[SchemaChange]:
        """
        Order changes so every edge is respected

        Ties are broken by phase, then by discovery order.

        Raises:
            CircularDependencyError: If the graph contains cycles
        """
        cycles = self.detect_cycles()
        if cycles:
            raise CircularDependencyError(
                [[self.get_node_display_name(node_id) for node_id in cycle] for cycle in cycles]
            )

        sorted_ids = nx.lexicographical_topological_sort(self.graph, key=self._sort_key)
        return [self.nodes[node_id].change for node_id in sorted_ids]

    def _sort_key(self, node_id: str) -> tuple[int, int]:
        node = self.nodes[node_id]
        return (node.phase, node.sequence)

    def get_node_display_name(self, node_id: str) -> str:
        node = self.nodes.get(node_id)
        if not node:
            return node_id
        return node.change.describe()

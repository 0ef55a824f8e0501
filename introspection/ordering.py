# ============================================================================
# TABLE DEPENDENCY ORDERING
# ============================================================================
# STATUS: Core - Foreign-key dependency graph and topological sort
# PURPOSE: Order tables so referenced tables come before referencing ones
# CREATED: 19 OCT 2026
# ============================================================================
"""
Table Dependency Ordering

Foreign keys define a dependency graph between tables: an edge
referenced -> host means the host table depends on the referenced one.

The sort is Kahn's algorithm with a min-heap keyed by (schema, name), so
among tables that are ready at the same time the smallest key goes first.
Cycles do not fail the sort. When no table is ready, the smallest table
whose pending dependencies all sit on its own cycle (its strongly connected
component) is emitted as if it were ready, and the sort continues. Tables
downstream of a cycle keep waiting for it. The result is the same for the
same set of tables and edges, whatever order they arrive in.

Self-references are ignored.
"""

import heapq
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set, Tuple

from core.models import TableId

logger = logging.getLogger(__name__)


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass
class DependencyGraph:
    """
    Dependency graph between tables.

    A -> B means "B depends on A" (A must be listed before B).
    """
    # Table -> tables that depend on it
    forward_edges: Dict[TableId, Set[TableId]] = field(default_factory=lambda: defaultdict(set))

    # Table -> tables it depends on
    backward_edges: Dict[TableId, Set[TableId]] = field(default_factory=lambda: defaultdict(set))

    # All tables
    nodes: Set[TableId] = field(default_factory=set)

    def add_node(self, node: TableId) -> None:
        self.nodes.add(node)

    def add_edge(self, from_node: TableId, to_node: TableId) -> None:
        """Add a dependency edge: to_node depends on from_node."""
        if from_node == to_node:
            return
        self.forward_edges[from_node].add(to_node)
        self.backward_edges[to_node].add(from_node)
        self.nodes.add(from_node)
        self.nodes.add(to_node)

    def get_dependencies(self, node: TableId) -> Set[TableId]:
        """Tables this table depends on."""
        return self.backward_edges.get(node, set())

    def get_dependents(self, node: TableId) -> Set[TableId]:
        """Tables that depend on this table."""
        return self.forward_edges.get(node, set())

    @classmethod
    def from_edges(
        cls,
        nodes: Iterable[TableId],
        edges: Iterable[Tuple[TableId, TableId]],
    ) -> "DependencyGraph":
        """
        Build from tables and (referenced, host) pairs.

        Edges touching a table outside `nodes` are dropped.
        """
        graph = cls()
        for node in nodes:
            graph.add_node(node)
        for referenced, host in edges:
            if referenced in graph.nodes and host in graph.nodes:
                graph.add_edge(referenced, host)
        return graph


# ============================================================================
# TOPOLOGICAL SORT
# ============================================================================

class TopologicalSorter:
    """Deterministic topological ordering with cycle tie-breaking."""

    def sort(self, graph: DependencyGraph) -> List[TableId]:
        """
        Order all tables of the graph.

        Args:
            graph: Dependency graph

        Returns:
            Every node exactly once, dependencies first
        """
        in_degree = {node: len(graph.get_dependencies(node)) for node in graph.nodes}
        component_of = self._component_index(graph)

        # Start with tables that have no dependencies
        heap = [(node.sort_key, node) for node, degree in in_degree.items() if degree == 0]
        heapq.heapify(heap)

        emitted: Set[TableId] = set()
        sorted_nodes: List[TableId] = []

        while len(sorted_nodes) < len(graph.nodes):
            if heap:
                _, node = heapq.heappop(heap)
                if node in emitted:
                    continue
            else:
                node = self._cycle_release(graph, component_of, emitted)
                logger.debug(f"Breaking foreign-key cycle at {node}")

            emitted.add(node)
            sorted_nodes.append(node)

            # Reduce in-degree for dependents
            for dependent in graph.get_dependents(node):
                if dependent in emitted:
                    continue
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    heapq.heappush(heap, (dependent.sort_key, dependent))

        return sorted_nodes

    def find_cycle_members(self, graph: DependencyGraph) -> List[TableId]:
        """Tables that sit on a foreign-key cycle."""
        members = [
            node
            for component in self.strongly_connected_components(graph)
            if len(component) > 1
            for node in component
        ]
        return sorted(members, key=lambda n: n.sort_key)

    def strongly_connected_components(self, graph: DependencyGraph) -> List[List[TableId]]:
        """
        Tarjan's algorithm, iterative.

        Components come out in reverse topological order of the
        condensed graph; members are in (schema, name) order.
        """
        index: Dict[TableId, int] = {}
        lowlink: Dict[TableId, int] = {}
        on_stack: Set[TableId] = set()
        stack: List[TableId] = []
        components: List[List[TableId]] = []
        counter = 0

        for root in sorted(graph.nodes, key=lambda n: n.sort_key):
            if root in index:
                continue
            work = [(root, iter(sorted(graph.get_dependents(root), key=lambda n: n.sort_key)))]
            index[root] = lowlink[root] = counter
            counter += 1
            stack.append(root)
            on_stack.add(root)

            while work:
                node, successors = work[-1]
                advanced = False
                for successor in successors:
                    if successor not in index:
                        index[successor] = lowlink[successor] = counter
                        counter += 1
                        stack.append(successor)
                        on_stack.add(successor)
                        work.append((
                            successor,
                            iter(sorted(graph.get_dependents(successor), key=lambda n: n.sort_key)),
                        ))
                        advanced = True
                        break
                    if successor in on_stack:
                        lowlink[node] = min(lowlink[node], index[successor])
                if advanced:
                    continue

                work.pop()
                if work:
                    parent = work[-1][0]
                    lowlink[parent] = min(lowlink[parent], lowlink[node])
                if lowlink[node] == index[node]:
                    component = []
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        component.append(member)
                        if member == node:
                            break
                    components.append(sorted(component, key=lambda n: n.sort_key))

        return components

    def _component_index(self, graph: DependencyGraph) -> Dict[TableId, int]:
        return {
            node: number
            for number, component in enumerate(self.strongly_connected_components(graph))
            for node in component
        }

    @staticmethod
    def _cycle_release(
        graph: DependencyGraph,
        component_of: Dict[TableId, int],
        emitted: Set[TableId],
    ) -> TableId:
        """Smallest table of a cycle that waits on no other pending component."""
        pending = [node for node in graph.nodes if node not in emitted]
        blocked = {
            component_of[node]
            for node in pending
            for dependency in graph.get_dependencies(node)
            if dependency not in emitted and component_of[dependency] != component_of[node]
        }
        return min(
            (node for node in pending if component_of[node] not in blocked),
            key=lambda n: n.sort_key,
        )


__all__ = ["DependencyGraph", "TopologicalSorter"]

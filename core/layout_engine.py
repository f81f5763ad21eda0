"""
Layout engine module for Butterflow.

This module assigns every workflow node a two-dimensional position. Layout
happens in two phases: an immediate grid placement so that something can be
drawn right away, and a layered (top-to-bottom) placement computed off the
event loop that replaces it once finished.
"""

import asyncio
import heapq
from collections import defaultdict
from typing import Dict, Hashable, List, Optional, Tuple
import logging

from ..config.config import Config, LayoutConfig, PlaceholderConfig
from ..errors import LayoutError
from .models import Position, WorkflowGraph


Positions = Dict[str, Position]

# Passes of the horizontal alignment step: down, up, down.
_ALIGNMENT_PASSES = ('down', 'up', 'down')


def placeholder_layout(graph: WorkflowGraph, config: Optional[PlaceholderConfig] = None) -> Positions:
    """
    Place nodes on a fixed grid in builder order.

    Node ``i`` goes to column ``i mod column_count`` and row
    ``i // column_count``.

    Args:
        graph: Graph to place
        config: Grid settings, defaults when omitted

    Returns:
        Mapping of node id to position
    """
    config = config or PlaceholderConfig()
    positions = {}
    for index, record in enumerate(graph.nodes):
        column = index % config.column_count
        row = index // config.column_count
        positions[record.id] = Position(
            x=config.origin + column * config.column_spacing,
            y=config.origin + row * config.row_spacing,
        )
    return positions


class LayeredLayout:
    """
    Layered graph drawing for dependency DAGs.

    The algorithm follows the classic four steps: layer assignment by longest
    path, dummy vertices on long edges, barycenter crossing reduction and
    horizontal alignment under a minimum separation constraint.
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()
        self.logger = logging.getLogger(__name__)

    def compute(self, graph: WorkflowGraph) -> Positions:
        """
        Compute layered positions for every node in the graph.

        Args:
            graph: Graph to lay out

        Returns:
            Mapping of node id to the top-left corner of its box

        Raises:
            LayoutError: The graph is empty, references unknown nodes or has a cycle
        """
        if not graph.nodes:
            raise LayoutError("Cannot lay out an empty graph")

        node_ids = graph.node_ids
        index = {node_id: i for i, node_id in enumerate(node_ids)}

        preds: Dict[str, List[str]] = defaultdict(list)
        succs: Dict[str, List[str]] = defaultdict(list)
        seen = set()
        for edge in graph.edges:
            if edge.source not in index or edge.target not in index:
                raise LayoutError(f"Edge {edge.id} references an unknown node")
            if (edge.source, edge.target) in seen:
                continue
            seen.add((edge.source, edge.target))
            preds[edge.target].append(edge.source)
            succs[edge.source].append(edge.target)

        order = self._topological_order(node_ids, index, preds, succs)
        layer_of = self._assign_layers(order, preds)
        layers, up, down = self._build_layers(node_ids, layer_of, succs)
        layers = self._reduce_crossings(layers, up, down)
        centers = self._assign_x(layers, up, down)

        width = self.config.node_width
        left = min(centers[node_id] for node_id in node_ids) - width / 2
        row_height = self.config.node_height + self.config.layer_spacing

        positions = {}
        for node_id in node_ids:
            positions[node_id] = Position(
                x=centers[node_id] - width / 2 - left + self.config.padding,
                y=self.config.padding + layer_of[node_id] * row_height,
            )

        self.logger.debug(f"Layered layout placed {len(positions)} nodes in {len(layers)} layers")
        return positions

    def _topological_order(self, node_ids: List[str], index: Dict[str, int],
                           preds: Dict[str, List[str]], succs: Dict[str, List[str]]) -> List[str]:
        in_degree = {node_id: len(preds[node_id]) for node_id in node_ids}
        ready = [(index[node_id], node_id) for node_id in node_ids if in_degree[node_id] == 0]
        heapq.heapify(ready)

        order = []
        while ready:
            _, node_id = heapq.heappop(ready)
            order.append(node_id)
            for successor in succs[node_id]:
                in_degree[successor] -= 1
                if in_degree[successor] == 0:
                    heapq.heappush(ready, (index[successor], successor))

        if len(order) != len(node_ids):
            remaining = [node_id for node_id in node_ids if in_degree[node_id] > 0]
            raise LayoutError(f"Graph contains a cycle through: {', '.join(remaining)}")
        return order

    @staticmethod
    def _assign_layers(order: List[str], preds: Dict[str, List[str]]) -> Dict[str, int]:
        layer_of: Dict[str, int] = {}
        for node_id in order:
            layer_of[node_id] = max((layer_of[p] + 1 for p in preds[node_id]), default=0)
        return layer_of

    @staticmethod
    def _build_layers(node_ids: List[str], layer_of: Dict[str, int],
                      succs: Dict[str, List[str]]) -> Tuple[List[List[Hashable]], Dict, Dict]:
        """Split nodes into layers, adding a dummy vertex per skipped layer on long edges."""
        depth = max(layer_of.values()) + 1
        layers: List[List[Hashable]] = [[] for _ in range(depth)]
        up: Dict[Hashable, List[Hashable]] = defaultdict(list)
        down: Dict[Hashable, List[Hashable]] = defaultdict(list)

        for node_id in node_ids:
            layers[layer_of[node_id]].append(node_id)

        for source in node_ids:
            for target in succs[source]:
                previous: Hashable = source
                for layer in range(layer_of[source] + 1, layer_of[target]):
                    dummy = ('dummy', source, target, layer)
                    layers[layer].append(dummy)
                    down[previous].append(dummy)
                    up[dummy].append(previous)
                    previous = dummy
                down[previous].append(target)
                up[target].append(previous)

        return layers, up, down

    def _reduce_crossings(self, layers: List[List[Hashable]], up: Dict, down: Dict) -> List[List[Hashable]]:
        best = [list(layer) for layer in layers]
        best_crossings = self._count_crossings(best, down)

        current = [list(layer) for layer in layers]
        for sweep in range(self.config.crossing_sweeps):
            if best_crossings == 0:
                break
            if sweep % 2 == 0:
                for i in range(1, len(current)):
                    current[i] = self._order_by_barycenter(current[i], current[i - 1], up)
            else:
                for i in range(len(current) - 2, -1, -1):
                    current[i] = self._order_by_barycenter(current[i], current[i + 1], down)

            crossings = self._count_crossings(current, down)
            if crossings < best_crossings:
                best = [list(layer) for layer in current]
                best_crossings = crossings

        return best

    @staticmethod
    def _order_by_barycenter(layer: List[Hashable], fixed: List[Hashable],
                             neighbors: Dict) -> List[Hashable]:
        fixed_index = {vertex: i for i, vertex in enumerate(fixed)}
        keys = {}
        for i, vertex in enumerate(layer):
            positions = [fixed_index[n] for n in neighbors.get(vertex, ()) if n in fixed_index]
            keys[vertex] = (sum(positions) / len(positions) if positions else float(i), i)
        return sorted(layer, key=lambda vertex: keys[vertex])

    @staticmethod
    def _count_crossings(layers: List[List[Hashable]], down: Dict) -> int:
        crossings = 0
        for upper, lower in zip(layers, layers[1:]):
            lower_index = {vertex: i for i, vertex in enumerate(lower)}
            segments = []
            for i, vertex in enumerate(upper):
                for target in down.get(vertex, ()):
                    segments.append((i, lower_index[target]))
            for a in range(len(segments)):
                for b in range(a + 1, len(segments)):
                    (u1, l1), (u2, l2) = segments[a], segments[b]
                    if (u1 - u2) * (l1 - l2) < 0:
                        crossings += 1
        return crossings

    def _width(self, vertex: Hashable) -> float:
        return 0.0 if isinstance(vertex, tuple) else self.config.node_width

    def _assign_x(self, layers: List[List[Hashable]], up: Dict, down: Dict) -> Dict[Hashable, float]:
        """Return the horizontal center of every vertex."""
        x: Dict[Hashable, float] = {}
        for layer in layers:
            cursor = 0.0
            for i, vertex in enumerate(layer):
                if i > 0:
                    cursor += self._separation(layer[i - 1], vertex)
                x[vertex] = cursor

        for direction in _ALIGNMENT_PASSES:
            if direction == 'down':
                sequence, neighbors = layers[1:], up
            else:
                sequence, neighbors = reversed(layers[:-1]), down
            for layer in sequence:
                desired = []
                for vertex in layer:
                    linked = neighbors.get(vertex, ())
                    desired.append(sum(x[n] for n in linked) / len(linked) if linked else x[vertex])
                for vertex, value in zip(layer, self._resolve_overlaps(layer, desired)):
                    x[vertex] = value

        return x

    def _separation(self, left: Hashable, right: Hashable) -> float:
        return (self._width(left) + self._width(right)) / 2 + self.config.node_spacing

    def _resolve_overlaps(self, layer: List[Hashable], desired: List[float]) -> List[float]:
        """
        Move desired centers apart until neighbours are at least one separation apart.

        Averages a left-to-right and a right-to-left packing; both satisfy the
        separation constraint, so their mean does too.
        """
        count = len(layer)
        packed_right = list(desired)
        for i in range(1, count):
            packed_right[i] = max(desired[i], packed_right[i - 1] + self._separation(layer[i - 1], layer[i]))

        packed_left = list(desired)
        for i in range(count - 2, -1, -1):
            packed_left[i] = min(desired[i], packed_left[i + 1] - self._separation(layer[i], layer[i + 1]))

        return [(a + b) / 2 for a, b in zip(packed_right, packed_left)]


class LayoutEngine:
    """
    Asynchronous front end to the two layout phases.
    """

    def __init__(self, config: Optional[Config] = None, algorithm: Optional[LayeredLayout] = None):
        """
        Initialize the layout engine.

        Args:
            config: Application configuration
            algorithm: Layered layout implementation, built from config when omitted
        """
        self.config = config or Config()
        self.algorithm = algorithm or LayeredLayout(self.config.layout)
        self.logger = logging.getLogger(__name__)

    def placeholder(self, graph: WorkflowGraph) -> Positions:
        """Return the immediate grid placement for the graph."""
        return placeholder_layout(graph, self.config.placeholder)

    async def layout(self, graph: WorkflowGraph) -> Positions:
        """
        Compute the layered placement in a worker thread.

        Args:
            graph: Graph to lay out

        Returns:
            Mapping of node id to position, covering every node

        Raises:
            LayoutError: The computation failed, timed out or left nodes unplaced
        """
        if not graph.nodes:
            raise LayoutError("Cannot lay out an empty graph")

        timeout = self.config.layout.timeout
        try:
            computation = asyncio.to_thread(self.algorithm.compute, graph)
            if timeout:
                positions = await asyncio.wait_for(computation, timeout)
            else:
                positions = await computation
        except LayoutError:
            raise
        except asyncio.TimeoutError as e:
            raise LayoutError(f"Layout timed out after {timeout} seconds") from e
        except Exception as e:
            raise LayoutError(f"Error calculating layout: {e}") from e

        if not positions:
            raise LayoutError("Layout calculation returned no node placements")
        missing = [node_id for node_id in graph.node_ids if node_id not in positions]
        if missing:
            raise LayoutError(f"Layout calculation left nodes unplaced: {', '.join(missing)}")

        return {node_id: positions[node_id] for node_id in graph.node_ids}

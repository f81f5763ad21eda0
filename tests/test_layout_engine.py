"""
Tests for the layout engine in Butterflow.
"""

import time

import pytest

from butterflow.config.config import Config, LayoutConfig, PlaceholderConfig
from butterflow.core.graph_builder import build
from butterflow.core.layout_engine import LayeredLayout, LayoutEngine, placeholder_layout
from butterflow.core.models import EdgeRecord, Position, Workflow, WorkflowGraph
from butterflow.errors import LayoutError


def chain_workflow(length: int) -> Workflow:
    nodes = [{'id': 'n0'}] + [{'id': f'n{i}', 'depends_on': [f'n{i - 1}']} for i in range(1, length)]
    return Workflow.from_dict({'nodes': nodes})


def assert_no_overlap(positions, config: LayoutConfig):
    by_row = {}
    for node_id, position in positions.items():
        by_row.setdefault(position.y, []).append(position.x)
    for xs in by_row.values():
        xs.sort()
        for left, right in zip(xs, xs[1:]):
            assert right - left >= config.node_width + config.node_spacing - 1e-6


class TestPlaceholderLayout:
    """Tests for the immediate grid placement."""

    def test_grid_formula(self):
        graph = build(chain_workflow(5))
        positions = placeholder_layout(graph, PlaceholderConfig())

        assert positions['n0'] == Position(100, 100)
        assert positions['n1'] == Position(400, 100)
        assert positions['n2'] == Position(700, 100)
        assert positions['n3'] == Position(100, 250)
        assert positions['n4'] == Position(400, 250)

    def test_custom_columns(self):
        graph = build(chain_workflow(3))
        positions = placeholder_layout(graph, PlaceholderConfig(column_count=1, row_spacing=10, origin=0))

        assert [positions[f'n{i}'].y for i in range(3)] == [0, 10, 20]


class TestLayeredLayout:
    """Tests for the layered placement algorithm."""

    def test_every_node_placed(self, sample_workflow):
        graph = build(sample_workflow)
        positions = LayeredLayout().compute(graph)

        assert set(positions) == set(graph.node_ids)

    def test_dependencies_above_dependents(self, sample_workflow):
        graph = build(sample_workflow)
        positions = LayeredLayout().compute(graph)

        for edge in graph.edges:
            assert positions[edge.source].y < positions[edge.target].y

    def test_layers_use_layer_pitch(self, sample_workflow):
        config = LayoutConfig()
        positions = LayeredLayout(config).compute(build(sample_workflow))
        pitch = config.node_height + config.layer_spacing

        assert positions['a'].y == config.padding
        assert positions['b'].y == positions['c'].y == config.padding + pitch
        assert positions['d'].y == config.padding + 2 * pitch

    def test_longest_path_layering(self):
        workflow = Workflow.from_dict({'nodes': [
            {'id': 'a'},
            {'id': 'b', 'depends_on': ['a']},
            {'id': 'c', 'depends_on': ['b']},
            {'id': 'd', 'depends_on': ['a', 'c']},
        ]})
        positions = LayeredLayout().compute(build(workflow))

        assert positions['d'].y > positions['c'].y > positions['b'].y

    def test_no_overlap_in_wide_layer(self):
        nodes = [{'id': 'root'}] + [{'id': f'leaf{i}', 'depends_on': ['root']} for i in range(7)]
        config = LayoutConfig()
        positions = LayeredLayout(config).compute(build(Workflow.from_dict({'nodes': nodes})))

        assert_no_overlap(positions, config)
        assert min(p.x for p in positions.values()) == pytest.approx(config.padding)

    def test_no_overlap_with_long_edges(self):
        workflow = Workflow.from_dict({'nodes': [
            {'id': 'a'},
            {'id': 'b', 'depends_on': ['a']},
            {'id': 'c', 'depends_on': ['b']},
            {'id': 'x'},
            {'id': 'y', 'depends_on': ['a', 'x']},
            {'id': 'z', 'depends_on': ['a', 'c', 'y']},
        ]})
        config = LayoutConfig()
        positions = LayeredLayout(config).compute(build(workflow))

        assert_no_overlap(positions, config)

    def test_independent_nodes_share_first_layer(self):
        workflow = Workflow.from_dict({'nodes': [{'id': 'a'}, {'id': 'b'}, {'id': 'c'}]})
        positions = LayeredLayout().compute(build(workflow))

        assert len({p.y for p in positions.values()}) == 1

    def test_deterministic(self, sample_workflow):
        graph = build(sample_workflow)
        assert LayeredLayout().compute(graph) == LayeredLayout().compute(graph)

    def test_empty_graph(self):
        with pytest.raises(LayoutError):
            LayeredLayout().compute(WorkflowGraph())

    def test_unknown_edge_endpoint(self, sample_workflow):
        graph = build(sample_workflow)
        broken = WorkflowGraph(nodes=graph.nodes, edges=graph.edges + (EdgeRecord('a', 'ghost'),))

        with pytest.raises(LayoutError):
            LayeredLayout().compute(broken)

    def test_cycle_rejected(self, sample_workflow):
        graph = build(sample_workflow)
        cyclic = WorkflowGraph(nodes=graph.nodes, edges=graph.edges + (EdgeRecord('d', 'a'),))

        with pytest.raises(LayoutError):
            LayeredLayout().compute(cyclic)


class SlowLayout(LayeredLayout):
    def compute(self, graph):
        time.sleep(0.5)
        return super().compute(graph)


class BrokenLayout(LayeredLayout):
    def compute(self, graph):
        raise RuntimeError("boom")


class PartialLayout(LayeredLayout):
    def compute(self, graph):
        return {graph.node_ids[0]: Position(0, 0)}


class TestLayoutEngine:
    """Tests for the asynchronous layout front end."""

    def test_placeholder_uses_config(self, sample_workflow, sample_config):
        sample_config.placeholder.origin = 0
        engine = LayoutEngine(sample_config)

        assert engine.placeholder(build(sample_workflow))['a'] == Position(0, 0)

    @pytest.mark.asyncio
    async def test_layout_matches_algorithm(self, sample_workflow, sample_config):
        graph = build(sample_workflow)
        engine = LayoutEngine(sample_config)

        positions = await engine.layout(graph)

        assert positions == LayeredLayout(sample_config.layout).compute(graph)
        assert list(positions) == graph.node_ids

    @pytest.mark.asyncio
    async def test_failure_wrapped(self, sample_workflow):
        engine = LayoutEngine(Config(), algorithm=BrokenLayout())

        with pytest.raises(LayoutError, match="boom"):
            await engine.layout(build(sample_workflow))

    @pytest.mark.asyncio
    async def test_missing_placements(self, sample_workflow):
        engine = LayoutEngine(Config(), algorithm=PartialLayout())

        with pytest.raises(LayoutError, match="unplaced"):
            await engine.layout(build(sample_workflow))

    @pytest.mark.asyncio
    async def test_timeout(self, sample_workflow):
        config = Config()
        config.layout.timeout = 0.05
        engine = LayoutEngine(config, algorithm=SlowLayout())

        with pytest.raises(LayoutError, match="timed out"):
            await engine.layout(build(sample_workflow))

    @pytest.mark.asyncio
    async def test_empty_graph(self):
        with pytest.raises(LayoutError):
            await LayoutEngine().layout(WorkflowGraph())

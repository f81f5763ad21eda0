"""
Tests for the graph builder in Butterflow.
"""

import pytest

from butterflow.errors import (
    CyclicDependency, DanglingDependency, DuplicateNode, EmptyWorkflow, GraphError,
)
from butterflow.core.graph_builder import GraphBuilder, aggregate_status, build
from butterflow.core.models import ProjectStatus, Workflow

S = ProjectStatus


class TestAggregateStatus:
    """Tests for status aggregation."""

    @pytest.mark.parametrize("statuses,expected", [
        ([], S.TODO),
        ([S.DONE, S.DONE], S.DONE),
        ([S.DONE, S.IN_PROGRESS], S.IN_PROGRESS),
        ([S.CLOSED, S.IS_BOT_PROCESSING], S.IN_PROGRESS),
        ([S.DONE, S.CLOSED], S.CLOSED),
        ([S.CLOSED, S.AWAITING_TRIGGER], S.CLOSED),
        ([S.TODO, S.AWAITING_TRIGGER], S.AWAITING_TRIGGER),
        ([S.DONE, S.TODO], S.TODO),
        ([S.TODO], S.TODO),
    ])
    def test_priority_rules(self, make_task, statuses, expected):
        tasks = [make_task(str(i), status) for i, status in enumerate(statuses)]
        assert aggregate_status(tasks) == expected

    def test_never_returns_bot_processing(self, make_task):
        tasks = [make_task('1', S.IS_BOT_PROCESSING)]
        assert GraphBuilder.aggregate_status(tasks) == S.IN_PROGRESS


class TestBuild:
    """Tests for graph construction."""

    def test_records_follow_node_order(self, sample_workflow, sample_tasks):
        graph = build(sample_workflow, sample_tasks)

        assert graph.node_ids == ['a', 'b', 'c', 'd']
        statuses = {record.id: record.aggregated_status for record in graph.nodes}
        assert statuses == {'a': S.DONE, 'b': S.IN_PROGRESS, 'c': S.AWAITING_TRIGGER, 'd': S.TODO}

    def test_one_edge_per_dependency(self, sample_workflow):
        graph = build(sample_workflow)

        assert [edge.id for edge in graph.edges] == ['ea-b', 'ea-c', 'eb-d', 'ec-d']

    def test_tasks_grouped_by_step(self, sample_workflow, make_task):
        tasks = [make_task('1', S.DONE, 'b'), make_task('2', S.TODO, 'b'), make_task('3', S.DONE, 'a')]
        graph = build(sample_workflow, tasks)

        assert [task.id for task in graph.get_record('b').tasks] == ['1', '2']
        assert graph.get_record('d').tasks == ()

    def test_unknown_step_ignored(self, sample_workflow, make_task):
        graph = build(sample_workflow, [make_task('x', S.CLOSED, 'nowhere')])
        assert all(record.tasks == () for record in graph.nodes)

    def test_build_is_deterministic(self, sample_workflow, sample_tasks):
        assert build(sample_workflow, sample_tasks) == build(sample_workflow, sample_tasks)

    def test_empty_workflow(self):
        with pytest.raises(EmptyWorkflow):
            build(Workflow(version='1.0'))

    def test_duplicate_node_id(self):
        workflow = Workflow.from_dict({'nodes': [{'id': 'a'}, {'id': 'a'}]})

        with pytest.raises(DuplicateNode) as excinfo:
            build(workflow)

        assert excinfo.value.node_id == 'a'
        assert isinstance(excinfo.value, GraphError)

    def test_dangling_dependency(self):
        workflow = Workflow.from_dict({'nodes': [{'id': 'a', 'depends_on': ['ghost']}]})

        with pytest.raises(DanglingDependency) as excinfo:
            build(workflow)

        assert excinfo.value.node_id == 'a'
        assert excinfo.value.missing_id == 'ghost'

    def test_cycle_rejected(self):
        workflow = Workflow.from_dict({'nodes': [
            {'id': 'a', 'depends_on': ['c']},
            {'id': 'b', 'depends_on': ['a']},
            {'id': 'c', 'depends_on': ['b']},
        ]})

        with pytest.raises(CyclicDependency) as excinfo:
            build(workflow)

        cycle = excinfo.value.cycle
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {'a', 'b', 'c'}
        assert isinstance(excinfo.value, GraphError)

    def test_self_dependency_is_a_cycle(self):
        workflow = Workflow.from_dict({'nodes': [{'id': 'a', 'depends_on': ['a']}]})

        with pytest.raises(CyclicDependency):
            build(workflow)

    def test_find_cycle_none_for_dag(self, sample_workflow):
        assert GraphBuilder.find_cycle(sample_workflow) is None

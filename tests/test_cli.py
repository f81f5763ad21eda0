"""
Tests for the Butterflow command line interface.
"""

import json

import yaml
from click.testing import CliRunner

from butterflow import __version__
from butterflow.cli import cli


def test_version():
    result = CliRunner().invoke(cli, ['--version'])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_generate_to_file(tmp_path):
    output = tmp_path / 'weather.json'

    result = CliRunner().invoke(cli, ['generate', 'a weather app', '--format', 'json', '-o', str(output)])

    assert result.exit_code == 0
    data = json.loads(output.read_text())
    assert data['workflow']['name'] == 'Weather App'
    assert data['workflow']['nodes'][0]['id'] == 'setup'


def test_layout_json(tmp_path, temp_workflow_file, temp_tasks_file):
    output = tmp_path / 'layout.json'

    result = CliRunner().invoke(cli, ['layout', str(temp_workflow_file), '-t', str(temp_tasks_file),
                                      '--format', 'json', '-o', str(output)])

    assert result.exit_code == 0
    data = json.loads(output.read_text())
    assert data['phase'] == 'layered'
    assert [node['id'] for node in data['nodes']] == ['a', 'b', 'c', 'd']
    assert data['nodes'][1]['status'] == 'in_progress'
    assert [edge['id'] for edge in data['edges']] == ['ea-b', 'ea-c', 'eb-d', 'ec-d']


def test_layout_text(tmp_path, temp_workflow_file):
    output = tmp_path / 'layout.txt'

    result = CliRunner().invoke(cli, ['layout', str(temp_workflow_file), '-o', str(output)])

    assert result.exit_code == 0
    text = output.read_text(encoding='utf-8')
    assert 'Workflow Nodes' in text
    assert '▼' in text


def test_layout_generated_workflow(tmp_path):
    generated = tmp_path / 'api.yaml'
    output = tmp_path / 'layout.yaml'
    runner = CliRunner()
    runner.invoke(cli, ['generate', 'rest api', '-o', str(generated)])

    result = runner.invoke(cli, ['layout', str(generated), '--format', 'yaml', '-o', str(output)])

    assert result.exit_code == 0
    assert len(yaml.safe_load(output.read_text())['nodes']) == 6


def test_layout_invalid_structure(tmp_path):
    workflow = tmp_path / 'cycle.yaml'
    workflow.write_text(yaml.dump({'nodes': [{'id': 'a', 'depends_on': ['b']}, {'id': 'b', 'depends_on': ['a']}]}))

    result = CliRunner().invoke(cli, ['layout', str(workflow), '--format', 'json', '-o', str(tmp_path / 'o.json')])

    assert result.exit_code == 1


def test_layout_malformed_file(tmp_path):
    workflow = tmp_path / 'broken.yaml'
    workflow.write_text("nodes: [unclosed")

    result = CliRunner().invoke(cli, ['layout', str(workflow)])

    assert result.exit_code == 1


def test_export(tmp_path, temp_workflow_file):
    out_dir = tmp_path / 'out'

    result = CliRunner().invoke(cli, ['export', str(temp_workflow_file), '-d', str(out_dir)])

    assert result.exit_code == 0
    assert (out_dir / 'src' / 'publish-report.js').exists()


def test_config_init_and_validate(tmp_path):
    path = tmp_path / 'butterflow.yaml'
    runner = CliRunner()

    result = runner.invoke(cli, ['config', '--init', str(path)])
    assert result.exit_code == 0
    assert path.exists()

    result = runner.invoke(cli, ['config', '--init', str(path)])
    assert result.exit_code == 1

    result = runner.invoke(cli, ['-c', str(path), 'config', '--validate', '--list'])
    assert result.exit_code == 0
    assert 'Configuration is valid' in result.output
    assert '[layout]' in result.output


def test_config_validate_reports_errors(tmp_path):
    path = tmp_path / 'bad.yaml'
    path.write_text(yaml.dump({'placeholder': {'column_count': 0}}))

    result = CliRunner().invoke(cli, ['-c', str(path), 'config', '--validate'])

    assert result.exit_code == 1


def test_layout_with_mistyped_config(tmp_path, temp_workflow_file):
    config = tmp_path / 'typo.yaml'
    config.write_text(yaml.dump({'layout': {'node_widht': 3}}))

    result = CliRunner().invoke(cli, ['-c', str(config), 'layout', str(temp_workflow_file), '--format', 'json'])

    assert result.exit_code == 1
    assert not isinstance(result.exception, TypeError)


def test_layout_with_malformed_config(tmp_path, temp_workflow_file):
    config = tmp_path / 'broken.yaml'
    config.write_text("layout: [unclosed")

    result = CliRunner().invoke(cli, ['-c', str(config), 'layout', str(temp_workflow_file), '--format', 'json'])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)


def test_layout_with_bad_timeout_environment(temp_workflow_file):
    result = CliRunner().invoke(cli, ['layout', str(temp_workflow_file)],
                                env={'BUTTERFLOW_LAYOUT_TIMEOUT': 'soon'})

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)


def test_layout_rejects_zero_timeout(temp_workflow_file):
    result = CliRunner().invoke(cli, ['layout', str(temp_workflow_file), '--timeout', '0'])

    assert result.exit_code == 1


def test_config_validate_malformed_file(tmp_path):
    path = tmp_path / 'broken.yaml'
    path.write_text("layout: [unclosed")

    result = CliRunner().invoke(cli, ['-c', str(path), 'config', '--validate'])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)

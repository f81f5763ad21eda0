"""
Main application entry point for Butterflow.

This module provides the functions behind each CLI command: launching the
interactive viewer, printing a computed layout, generating mock workflows,
exporting snippets and managing configuration. Every function returns a
process exit code.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from rich.console import Console

from .config.config import Config
from .config.settings import Settings
from .core.controller import DiagramController
from .core.event_bus import EventBus
from .core.models import Task, Workflow
from .core.workflow_generator import generate_workflow
from .errors import ButterflowError, ConfigError
from .parsers.task_parser import TaskParser
from .parsers.workflow_parser import WorkflowParser
from .utils.diagram_render import render_diagram
from .utils.log_setup import setup_logging
from .utils.snippets import export_snippets
from .utils.status_visualization import StatusVisualization


logger = logging.getLogger(__name__)


def load_config(config_path: Optional[Path] = None, cli_options: Optional[Dict[str, Any]] = None) -> Config:
    """
    Load configuration, apply CLI overrides and set up logging.

    Args:
        config_path: Path to configuration file
        cli_options: CLI option overrides

    Returns:
        Config instance

    Raises:
        ConfigError: The configuration cannot be read or fails validation
    """
    config = Config.load(config_path)
    if cli_options:
        config.apply_cli_overrides(cli_options)
    errors = config.validate()
    if errors:
        raise ConfigError("; ".join(errors))
    setup_logging(config.logging.level, Path(config.logging.file) if config.logging.file else None)
    return config


def load_sources(config: Config, workflow_path: Path,
                 tasks_path: Optional[Path] = None) -> Tuple[Workflow, List[Task]]:
    """Parse a workflow file and an optional task file."""
    workflow = WorkflowParser(config).parse(workflow_path)
    tasks = TaskParser(config).parse(tasks_path) if tasks_path else []
    return workflow, tasks


def _write_output(text: str, output_path: Optional[Path]) -> None:
    if output_path:
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(text)
        logger.info(f"Wrote {output_path}")
    else:
        sys.stdout.write(text)


def _dump(data: Any, output_format: str) -> str:
    if output_format == 'json':
        return json.dumps(data, indent=2) + '\n'
    return yaml.dump(data, default_flow_style=False, sort_keys=False)


def layout_result(controller: DiagramController) -> Dict[str, Any]:
    """
    Describe the controller's current diagram as plain data.

    Args:
        controller: Controller after a load

    Returns:
        Dictionary with the phase, positioned nodes and edges
    """
    workflow = controller.workflow
    return {
        'workflow': workflow.name if workflow else None,
        'version': workflow.version if workflow else None,
        'phase': controller.layout_phase,
        'error': controller.error,
        'nodes': [
            {
                'id': view.id,
                'name': view.node.name,
                'status': view.aggregated_status.value,
                'tasks': len(view.tasks),
                'x': view.position.x,
                'y': view.position.y,
            }
            for view in controller.views()
        ],
        'edges': [
            {'id': edge.id, 'source': edge.source, 'target': edge.target}
            for edge in controller.edges()
        ],
    }


def print_layout(console: Console, controller: DiagramController, config: Config) -> None:
    """Print the node table and the drawn diagram."""
    views = controller.views()
    console.print(StatusVisualization.create_node_table(views))
    console.print(render_diagram(views, controller.edges(), config.display, config.layout))
    if controller.error:
        console.print(f"[yellow]{controller.error}[/yellow]")


def run_layout(config_path: Optional[Path] = None, workflow_path: Optional[Path] = None,
               tasks_path: Optional[Path] = None, output_path: Optional[Path] = None,
               output_format: str = 'text', timeout: Optional[float] = None) -> int:
    """
    Build the graph, run both layout phases and print the result.

    Args:
        config_path: Path to configuration file
        workflow_path: Workflow file
        tasks_path: Optional task file
        output_path: Output file, stdout when omitted
        output_format: 'text', 'json' or 'yaml'
        timeout: Layout timeout in seconds

    Returns:
        Exit code
    """
    try:
        config = load_config(config_path, {'timeout': timeout})
        workflow, tasks = load_sources(config, workflow_path, tasks_path)

        controller = DiagramController(config, event_bus=EventBus())
        applied = asyncio.run(controller.load(workflow, tasks))
        if controller.graph is None:
            logger.error(controller.error)
            return 1

        if output_format == 'text':
            if output_path:
                with open(output_path, 'w', encoding='utf-8') as f:
                    print_layout(Console(file=f), controller, config)
            else:
                print_layout(Console(), controller, config)
        else:
            _write_output(_dump(layout_result(controller), output_format), output_path)

        return 0 if applied else 1

    except ButterflowError as e:
        logger.error(f"Layout error: {str(e)}")
        return 1


def run_app(config_path: Optional[Path] = None, workflow_path: Optional[Path] = None,
            tasks_path: Optional[Path] = None, theme: Optional[str] = None,
            follow: bool = False) -> int:
    """
    Run the interactive viewer.

    Args:
        config_path: Path to configuration file
        workflow_path: Workflow file to view
        tasks_path: Optional task file
        theme: UI theme to use
        follow: Reload when the files change

    Returns:
        Exit code
    """
    from .ui.app import ButterflowApp

    try:
        config = load_config(config_path, {'theme': theme})
        workflow, tasks = load_sources(config, workflow_path, tasks_path)
    except ButterflowError as e:
        logger.error(f"Error loading workflow {workflow_path}: {str(e)}")
        return 1

    controller = DiagramController(config)
    app = ButterflowApp(config, controller, workflow=workflow, tasks=tasks,
                        workflow_path=workflow_path, tasks_path=tasks_path, follow=follow)
    app.run()
    return 0


def run_generate(prompt: str, output_path: Optional[Path] = None, output_format: str = 'yaml') -> int:
    """
    Produce a canned workflow for a prompt.

    Args:
        prompt: Free-text request
        output_path: Output file, stdout when omitted
        output_format: 'yaml' or 'json'

    Returns:
        Exit code
    """
    try:
        setup_logging(Config.load().logging.level)
        result = generate_workflow(prompt)
    except (ConfigError, ValueError) as e:
        logger.error(str(e))
        return 1

    logger.info(f"Generated '{result.template}' workflow")
    print(result.message, file=sys.stderr)
    _write_output(_dump({'workflow': result.workflow.to_dict()}, output_format), output_path)
    return 0


def run_export(config_path: Optional[Path] = None, workflow_path: Optional[Path] = None,
               directory: Optional[Path] = None) -> int:
    """
    Write each node's code snippet under a directory.

    Args:
        config_path: Path to configuration file
        workflow_path: Workflow file
        directory: Output root

    Returns:
        Exit code
    """
    try:
        config = load_config(config_path)
        workflow = WorkflowParser(config).parse(workflow_path)
        written = export_snippets(workflow.nodes, directory)
    except (ButterflowError, ValueError, OSError) as e:
        logger.error(f"Export error: {str(e)}")
        return 1

    for path in written:
        print(path)
    logger.info(f"Exported {len(written)} snippets to {directory}")
    return 0


def run_config_commands(config_path: Optional[Path] = None, list_config: bool = False,
                        validate_config: bool = False, init_path: Optional[Path] = None) -> int:
    """
    Run configuration management commands.

    Args:
        config_path: Path to configuration file
        list_config: Whether to list all configuration options
        validate_config: Whether to validate the configuration
        init_path: Write a default configuration file here

    Returns:
        Exit code
    """
    if init_path:
        if init_path.exists():
            print(f"Configuration file already exists: {init_path}", file=sys.stderr)
            return 1
        Config().save(init_path)
        print(f"Created default configuration file: {init_path}")
        return 0

    if not config_path:
        default_path = Path(Settings.DEFAULT_CONFIG_PATH)
        if default_path.exists():
            config_path = default_path

    try:
        config = Config.load(config_path)
    except ConfigError as e:
        print(f"Could not read configuration: {e}", file=sys.stderr)
        return 1

    if validate_config:
        errors = config.validate()
        if errors:
            for error in errors:
                print(f"Configuration error: {error}", file=sys.stderr)
            return 1
        print("Configuration is valid")

    if list_config:
        print("Configuration:")
        for section, options in config.to_dict().items():
            print(f"  [{section}]")
            for key, value in options.items():
                print(f"    {key} = {value}")
            print()

    return 0


def main() -> None:
    """Main entry point for the application."""
    from .cli import main as cli_main
    cli_main()


if __name__ == "__main__":
    main()

"""
Command Line Interface for Butterflow.

This module provides a CLI for generating mock workflows, computing and
printing diagram layouts, launching the interactive viewer, exporting code
snippets and managing configuration.
"""

import click
import sys
from pathlib import Path
from typing import Optional
import os

from . import __version__
from .main import run_app, run_config_commands, run_export, run_generate, run_layout


def _set_verbosity(verbose: int) -> None:
    if verbose == 1:
        os.environ['BUTTERFLOW_LOG_LEVEL'] = 'INFO'
    elif verbose >= 2:
        os.environ['BUTTERFLOW_LOG_LEVEL'] = 'DEBUG'


@click.group(help="Butterflow - Generate, lay out and explore workflow diagrams.")
@click.option('--config', '-c', type=click.Path(exists=True, path_type=Path),
              help='Path to configuration file')
@click.option('--verbose', '-V', count=True, help='Increase verbosity (use -VV for debug)')
@click.version_option(__version__, '--version', '-v', prog_name="Butterflow")
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], verbose: int) -> None:
    """
    Butterflow - Generate, lay out and explore workflow diagrams.

    Usage Examples:
      butterflow generate "weather app" -o weather.yaml   # Mock workflow from a prompt
      butterflow layout weather.yaml -t tasks.yaml         # Print the computed layout
      butterflow view weather.yaml --follow                # Interactive viewer
      butterflow export weather.yaml -d out/               # Write node code snippets
      butterflow config --list                             # Show configuration
    """
    _set_verbosity(verbose)
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config


@cli.command(help="Generate a workflow from a free-text prompt.")
@click.argument('prompt')
@click.option('--output', '-o', type=click.Path(path_type=Path), help='Output file (default: stdout)')
@click.option('--format', 'output_format', type=click.Choice(['yaml', 'json']), default='yaml',
              help='Output format (default: yaml)')
def generate(prompt: str, output: Optional[Path], output_format: str) -> None:
    """
    Generate a workflow from a free-text prompt.

    The prompt is matched against a handful of keyword templates; unmatched
    prompts get the generic process workflow.

    Examples:
      butterflow generate "build me a weather dashboard"
      butterflow generate "portfolio site" --format json -o site.json
    """
    sys.exit(run_generate(prompt, output_path=output, output_format=output_format))


@cli.command(help="Compute and print the diagram layout of a workflow.")
@click.argument('workflow', type=click.Path(exists=True, path_type=Path))
@click.option('--tasks', '-t', type=click.Path(exists=True, path_type=Path), help='Task file')
@click.option('--format', 'output_format', type=click.Choice(['text', 'json', 'yaml']), default='text',
              help='Output format (default: text)')
@click.option('--output', '-o', type=click.Path(path_type=Path), help='Output file (default: stdout)')
@click.option('--timeout', type=float, default=None, help='Layout timeout in seconds')
@click.pass_context
def layout(ctx, workflow: Path, tasks: Optional[Path], output_format: str,
           output: Optional[Path], timeout: Optional[float]) -> None:
    """
    Compute and print the diagram layout of a workflow.

    Examples:
      butterflow layout workflow.yaml
      butterflow layout workflow.yaml -t tasks.json --format json
    """
    exit_code = run_layout(config_path=ctx.obj.get('config_path'), workflow_path=workflow,
                           tasks_path=tasks, output_path=output, output_format=output_format,
                           timeout=timeout)
    sys.exit(exit_code)


@cli.command(help="View a workflow in the interactive Butterflow UI.")
@click.argument('workflow', type=click.Path(exists=True, path_type=Path))
@click.option('--tasks', '-t', type=click.Path(exists=True, path_type=Path), help='Task file')
@click.option('--theme', type=str, default=None, help='UI theme to use')
@click.option('--follow', is_flag=True, help='Reload when the workflow or task file changes')
@click.pass_context
def view(ctx, workflow: Path, tasks: Optional[Path], theme: Optional[str], follow: bool) -> None:
    """
    View a workflow in the interactive Butterflow UI.

    Examples:
      butterflow view workflow.yaml
      butterflow view workflow.yaml -t tasks.yaml --follow
    """
    exit_code = run_app(config_path=ctx.obj.get('config_path'), workflow_path=workflow,
                        tasks_path=tasks, theme=theme, follow=follow)
    sys.exit(exit_code)


@cli.command(help="Write each node's code snippet to its file path.")
@click.argument('workflow', type=click.Path(exists=True, path_type=Path))
@click.option('--directory', '-d', type=click.Path(file_okay=False, path_type=Path), required=True,
              help='Output directory')
@click.pass_context
def export(ctx, workflow: Path, directory: Path) -> None:
    """
    Write each node's code snippet to its file path.

    Example:
      butterflow export workflow.yaml -d generated/
    """
    sys.exit(run_export(config_path=ctx.obj.get('config_path'), workflow_path=workflow, directory=directory))


@cli.command(name='config', help="Manage Butterflow configuration.")
@click.option('--list', 'list_config', is_flag=True, help='List all configuration options')
@click.option('--validate', 'validate_config', is_flag=True, help='Validate the configuration')
@click.option('--init', 'init_path', type=click.Path(dir_okay=False, path_type=Path),
              help='Write a default configuration file')
@click.pass_context
def config_cmd(ctx, list_config: bool, validate_config: bool, init_path: Optional[Path]) -> None:
    """
    Manage Butterflow configuration.

    Examples:
      butterflow config --init butterflow.yaml
      butterflow -c butterflow.yaml config --validate
      butterflow config --list
    """
    if not (list_config or validate_config or init_path):
        click.echo(ctx.get_help())
        return
    exit_code = run_config_commands(config_path=ctx.obj.get('config_path'), list_config=list_config,
                                    validate_config=validate_config, init_path=init_path)
    sys.exit(exit_code)


def main() -> None:
    """Main CLI entry point."""
    cli()


if __name__ == "__main__":
    main()

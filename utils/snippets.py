"""
Code snippet helpers for Butterflow.

Nodes carry canned code snippets; these helpers tidy them for display and
write them out as files.
"""

import logging
from pathlib import Path
from typing import Iterable, List

from ..core.models import Node


logger = logging.getLogger(__name__)

_LANGUAGES = {
    '.js': 'javascript',
    '.jsx': 'javascript',
    '.ts': 'typescript',
    '.tsx': 'typescript',
    '.css': 'css',
    '.json': 'json',
    '.html': 'html',
    '.py': 'python',
}


def language_for(file_path: str) -> str:
    """Guess a syntax highlighting lexer from a file extension."""
    return _LANGUAGES.get(Path(file_path).suffix.lower(), 'javascript')


def dedent_snippet(code: str) -> str:
    """
    Remove the indentation shared by all non-blank lines.

    Unlike ``textwrap.dedent`` any whitespace character counts as one column,
    so tab- and space-indented lines are trimmed alike.
    """
    lines = code.split('\n')
    indents = [len(line) - len(line.lstrip()) for line in lines if line.strip()]
    if not indents:
        return code
    shift = min(indents)
    return '\n'.join(line[shift:] for line in lines)


def export_snippets(nodes: Iterable[Node], directory: Path) -> List[Path]:
    """
    Write each node's snippet to its resolved file path under a directory.

    Nodes without a snippet are skipped.

    Args:
        nodes: Workflow nodes
        directory: Output root

    Returns:
        Paths written, in node order
    """
    directory = Path(directory)
    root = directory.resolve()
    written = []
    for node in nodes:
        if not node.code_snippet:
            continue
        target = (directory / node.resolved_file_path()).resolve()
        if root not in target.parents:
            raise ValueError(f"File path of node '{node.id}' escapes the output directory")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(dedent_snippet(node.code_snippet) + '\n', encoding='utf-8')
        logger.debug(f"Wrote {target}")
        written.append(target)
    return written

"""
Base parser module for Butterflow.

This module provides a base class for the workflow and task parsers with
common file handling and document decoding.
"""

import json
from pathlib import Path
from typing import Any, Union
from abc import ABC, abstractmethod
import logging

import yaml

from ..errors import WorkflowLoadError


class BaseParser(ABC):
    """
    Abstract base class for all parsers in Butterflow.
    """

    def __init__(self, config=None):
        """
        Initialize the base parser.

        Args:
            config: Application configuration (optional)
        """
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def parse(self, source: Union[str, Path]) -> Any:
        """
        Parse the source and return structured data.

        Args:
            source: Path of the file to parse

        Returns:
            Parsed model object
        """
        pass

    @abstractmethod
    def parse_data(self, data: Any) -> Any:
        """
        Build model objects from an already decoded document.

        Args:
            data: Decoded JSON/YAML document

        Returns:
            Parsed model object
        """
        pass

    def parse_text(self, text: str) -> Any:
        """
        Parse JSON or YAML content held in a string.

        Args:
            text: Document content

        Returns:
            Parsed model object
        """
        return self.parse_data(self.decode(text))

    def validate_source(self, source: Union[str, Path]) -> bool:
        """
        Validate that the source exists and is accessible.

        Args:
            source: Source path to validate

        Returns:
            True if source is valid, False otherwise
        """
        path = Path(source)
        if not path.exists():
            self.logger.error(f"Source does not exist: {source}")
            return False

        if path.is_dir():
            self.logger.error(f"Source is a directory, expected a file: {source}")
            return False

        return True

    def read_file(self, file_path: Union[str, Path], encoding: str = 'utf-8') -> str:
        """
        Read a file, raising WorkflowLoadError when it cannot be read.

        Args:
            file_path: Path to the file to read
            encoding: File encoding (default: utf-8)

        Returns:
            File content as string
        """
        if not self.validate_source(file_path):
            raise WorkflowLoadError(f"Cannot read {file_path}")
        try:
            with open(file_path, 'r', encoding=encoding) as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise WorkflowLoadError(f"Error reading file {file_path}: {e}") from e

    def decode(self, text: str) -> Any:
        """
        Decode a JSON or YAML document.

        JSON is tried first since it is the cheaper and stricter of the two;
        YAML accepts JSON too, so the fallback handles both.

        Args:
            text: Document content

        Returns:
            Decoded Python data
        """
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            pass
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise WorkflowLoadError(f"Malformed document: {e}") from e

    def load(self, source: Union[str, Path]) -> Any:
        """Read and decode a file."""
        return self.decode(self.read_file(source))

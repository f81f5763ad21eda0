"""
Configuration management for Butterflow.

This module provides classes and methods for loading, validating,
and managing application configuration with CLI integration support.
"""

import yaml
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, asdict, field
from ..errors import ConfigError
from .settings import Settings


@dataclass
class LayoutConfig:
    """Configuration for the layered layout algorithm."""
    node_width: float = Settings.NODE_WIDTH
    node_height: float = Settings.NODE_HEIGHT
    node_spacing: float = 50
    layer_spacing: float = 80
    padding: float = 12
    crossing_sweeps: int = 8
    timeout: Optional[float] = None  # seconds, None waits indefinitely


@dataclass
class PlaceholderConfig:
    """Configuration for the immediate grid placement."""
    column_count: int = 3
    column_spacing: float = 300
    row_spacing: float = 150
    origin: float = 100


@dataclass
class DisplayConfig:
    """Configuration for display settings."""
    theme: str = "default"
    scale_x: float = 12  # layout units per terminal column
    scale_y: float = 30  # layout units per terminal row


@dataclass
class MonitorConfig:
    """Configuration for file monitoring."""
    enabled: bool = True
    debounce: float = 0.5  # seconds


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    file: Optional[str] = None


_SECTIONS = {
    'layout': LayoutConfig,
    'placeholder': PlaceholderConfig,
    'display': DisplayConfig,
    'monitor': MonitorConfig,
    'logging': LoggingConfig,
}


@dataclass
class Config:
    """Main configuration class for Butterflow."""
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    placeholder: PlaceholderConfig = field(default_factory=PlaceholderConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        # Environment variable overrides
        if os.getenv('BUTTERFLOW_THEME'):
            self.display.theme = os.getenv('BUTTERFLOW_THEME')
        if os.getenv('BUTTERFLOW_LOG_LEVEL'):
            self.logging.level = os.getenv('BUTTERFLOW_LOG_LEVEL')
        if os.getenv('BUTTERFLOW_LAYOUT_TIMEOUT'):
            self.layout.timeout = _env_timeout()

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'Config':
        """
        Load configuration from a YAML file or return default configuration.

        Args:
            config_path: Path to configuration file

        Returns:
            Config instance

        Raises:
            ConfigError: The file is not valid YAML or has unknown options
        """
        # Check for config path in environment if not provided
        if not config_path:
            env_config_path = os.getenv('BUTTERFLOW_CONFIG')
            if env_config_path:
                config_path = Path(env_config_path)

        if config_path and config_path.exists():
            try:
                with open(config_path, 'r') as f:
                    data = yaml.safe_load(f)
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"Cannot read configuration {config_path}: {e}") from e
            if data is None:
                data = {}
            return cls.from_dict(data)
        else:
            # Return default configuration
            return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """
        Create Config instance from dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            Config instance

        Raises:
            ConfigError: A section is not a mapping or has unknown options
        """
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping of sections")

        config_data = {}
        for name, section_cls in _SECTIONS.items():
            section_data = data.get(name)
            if section_data is None:
                config_data[name] = section_cls()
            elif not isinstance(section_data, dict):
                raise ConfigError(f"Configuration section '{name}' must be a mapping")
            else:
                try:
                    config_data[name] = section_cls(**section_data)
                except TypeError as e:
                    raise ConfigError(f"Invalid options in section '{name}': {e}") from e
        return cls(**config_data)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert Config instance to dictionary.

        Returns:
            Configuration dictionary
        """
        return asdict(self)

    def save(self, config_path: Path) -> None:
        """
        Save configuration to a YAML file.

        Args:
            config_path: Path to save configuration file
        """
        with open(config_path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)

    def validate(self) -> List[str]:
        """
        Validate the configuration and return a list of errors.

        Returns:
            List of validation errors, empty if valid
        """
        errors = []

        # Validate layout settings
        if self.layout.node_width <= 0 or self.layout.node_height <= 0:
            errors.append("Layout node size must be positive")
        if self.layout.node_spacing < 0:
            errors.append("Layout node spacing must not be negative")
        if self.layout.layer_spacing <= 0:
            errors.append("Layout layer spacing must be positive")
        if self.layout.crossing_sweeps < 0:
            errors.append("Layout crossing sweeps must not be negative")
        if self.layout.timeout is not None and self.layout.timeout <= 0:
            errors.append("Layout timeout must be positive")

        # Validate placeholder settings
        if self.placeholder.column_count <= 0:
            errors.append("Placeholder column count must be positive")

        # Validate display settings
        if self.display.scale_x <= 0 or self.display.scale_y <= 0:
            errors.append("Display scale must be positive")

        # Validate logging level
        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if self.logging.level.upper() not in valid_log_levels:
            errors.append(f"Invalid logging level: {self.logging.level}. Valid values: {', '.join(valid_log_levels)}")

        return errors

    def get_env_overrides(self) -> Dict[str, Any]:
        """
        Get configuration values that are overridden by environment variables.

        Returns:
            Dictionary of environment variable overrides
        """
        overrides = {}

        if os.getenv('BUTTERFLOW_THEME'):
            overrides['display.theme'] = os.getenv('BUTTERFLOW_THEME')
        if os.getenv('BUTTERFLOW_LOG_LEVEL'):
            overrides['logging.level'] = os.getenv('BUTTERFLOW_LOG_LEVEL')
        if os.getenv('BUTTERFLOW_LAYOUT_TIMEOUT'):
            overrides['layout.timeout'] = _env_timeout()

        return overrides

    def apply_cli_overrides(self, cli_options: Dict[str, Any]) -> None:
        """
        Apply command-line interface options as overrides to the configuration.

        Args:
            cli_options: Dictionary of CLI options to apply
        """
        if cli_options.get('theme'):
            self.display.theme = cli_options['theme']
        if cli_options.get('log_level'):
            self.logging.level = cli_options['log_level']
        if cli_options.get('timeout') is not None:
            self.layout.timeout = cli_options['timeout']


def _env_timeout() -> float:
    value = os.getenv('BUTTERFLOW_LAYOUT_TIMEOUT')
    try:
        return float(value)
    except ValueError as e:
        raise ConfigError(f"BUTTERFLOW_LAYOUT_TIMEOUT must be a number of seconds, got '{value}'") from e

"""
Configuration management for the MCP mediator.

YAML-based configuration with environment variable overrides, validated with
Pydantic models.

Example usage:
    >>> config_manager = ConfigManager()
    >>> config = config_manager.load_config("config.yaml")
    >>> print(config.mcp.protocol_version)

Environment variable overrides:
    - MCP_SERVER_HOST: Overrides server.host
    - MCP_SERVER_PORT: Overrides server.port
    - MCP_LOG_LEVEL: Overrides logging.level
    - MCP_SERVER_NAME: Overrides mcp.name
    - MCP_PROTOCOL_VERSION: Overrides mcp.protocol_version
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ConfigurationError

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8080
DEFAULT_PATH = "/mcp"
DEFAULT_PROTOCOL_VERSION = "2025-06-18"

logger = logging.getLogger(__name__)


class ServerConfig(BaseModel):
    """HTTP host settings.

    Attributes:
        host (str): Bind address. Defaults to 'localhost'.
        port (int): Listen port, 0 picks a free port. Defaults to 8080.
        path (str): The single endpoint path that accepts JSON-RPC POSTs.
        request_timeout_sec (float): After this many seconds the request's
            cancellation token is cancelled.
        debug (bool): Verbose logging.
    """
    host: str = Field(default=DEFAULT_HOST, description="Server bind address")
    port: int = Field(default=DEFAULT_PORT, description="Server port number", ge=0, le=65535)
    path: str = Field(default=DEFAULT_PATH, description="JSON-RPC endpoint path")
    request_timeout_sec: float = Field(default=60.0, description="Per-request cancellation timeout", gt=0)
    debug: bool = Field(default=False, description="Enable debug mode")


class LoggingConfig(BaseModel):
    """Logging section, consumed by ``configure_from_dict``."""
    level: str = Field(default="INFO", description="Logging level")
    format_json: bool = Field(default=True, description="Emit JSON lines")
    include_source_location: bool = Field(default=False, description="Add file/line/function to records")


class McpConfig(BaseModel):
    """Server identity reported by ``initialize``.

    Attributes:
        name (str): Server name in ``serverInfo``.
        title (str): Optional display name.
        version (str): Server version in ``serverInfo``.
        protocol_version (str): Protocol version answered when the client does
            not ask for one.
        instructions (str): Optional usage hints for the client model.
    """
    name: str = Field(default="mcp-mediator", description="MCP server name identifier")
    title: Optional[str] = Field(default=None, description="Human-readable server title")
    version: str = Field(default="0.1.0", description="Server version")
    protocol_version: str = Field(default=DEFAULT_PROTOCOL_VERSION, description="Default MCP protocol version")
    instructions: Optional[str] = Field(default=None, description="Instructions returned by initialize")


class Config(BaseModel):
    """Root configuration object.

    Example:
        >>> config = Config(mcp={"name": "directory-connector"})
        >>> config.server.port = 9000
    """
    model_config = ConfigDict(validate_assignment=True)

    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    mcp: McpConfig = Field(default_factory=McpConfig)


class ConfigManager:
    """Load configuration files with environment overrides and validation."""

    def __init__(self) -> None:
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load_config(self, config_path: str) -> Config:
        """
        Load configuration from a YAML file, then apply environment overrides.

        Raises:
            ConfigurationError: missing file, invalid YAML or failed validation
        """
        self.logger.info(f"Loading configuration from: {config_path}")

        config_file = Path(config_path)
        if not config_file.exists():
            self.logger.error(f"Configuration file not found: {config_path}")
            raise ConfigurationError(
                f"Configuration file not found: {config_path}\n"
                f"Please ensure the file exists and is readable."
            )

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                yaml_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            self.logger.error(f"Invalid YAML format in {config_path}: {e}")
            raise ConfigurationError(
                f"Invalid YAML format in {config_path}: {e}\n"
                f"Please check the YAML syntax and ensure proper indentation."
            ) from e
        except OSError as e:
            self.logger.error(f"Error reading config file {config_path}: {e}")
            raise ConfigurationError(f"Error reading config file {config_path}: {e}") from e

        if yaml_data is None:
            self.logger.warning("YAML file is empty, using default configuration")
            yaml_data = {}
        if not isinstance(yaml_data, dict):
            raise ConfigurationError(f"Top level of {config_path} must be a mapping")

        yaml_data = self._apply_env_overrides(yaml_data)

        try:
            config = Config(**yaml_data)
        except ValidationError as e:
            self.logger.error(f"Configuration validation failed: {e}")
            raise ConfigurationError(
                f"Configuration validation failed: {e}\n"
                f"Please check your configuration values and ensure they meet the required format."
            ) from e

        self.logger.info("Configuration loaded and validated successfully")
        return config

    def _apply_env_overrides(self, yaml_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply MCP_* environment variables on top of the file contents."""
        for section in ('server', 'logging', 'mcp'):
            if not isinstance(yaml_data.get(section), dict):
                yaml_data[section] = {}

        if 'MCP_SERVER_HOST' in os.environ:
            yaml_data['server']['host'] = os.environ['MCP_SERVER_HOST']
        if 'MCP_SERVER_PORT' in os.environ:
            try:
                yaml_data['server']['port'] = int(os.environ['MCP_SERVER_PORT'])
            except ValueError:
                self.logger.warning("Ignoring non-integer MCP_SERVER_PORT")
        if 'MCP_LOG_LEVEL' in os.environ:
            yaml_data['logging']['level'] = os.environ['MCP_LOG_LEVEL']
        if 'MCP_SERVER_NAME' in os.environ:
            yaml_data['mcp']['name'] = os.environ['MCP_SERVER_NAME']
        if 'MCP_PROTOCOL_VERSION' in os.environ:
            yaml_data['mcp']['protocol_version'] = os.environ['MCP_PROTOCOL_VERSION']

        return yaml_data

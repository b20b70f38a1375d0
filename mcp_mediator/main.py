#!/usr/bin/env python3
"""
MCP mediator - command-line entry point.

Loads configuration, sets up logging, imports a tool registry factory and
serves the mediator over the reference HTTP host.

Usage:
    python -m mcp_mediator --config config.yaml --tools my_connector.tools:build_registry
"""

import argparse
import importlib
import sys
from typing import List, Optional

from .config import Config, ConfigManager
from .core.logging_config import LogLevel, configure_from_dict, get_logger, logging_event_sink, setup_logging
from .exceptions import ConfigurationError
from .http_host import McpHttpServer
from .mcp.server import McpMediator, RegistryFactory
from .tool_registry import ToolRegistry

logger = get_logger("mcp_mediator.main")


def load_registry_factory(spec: Optional[str]) -> RegistryFactory:
    """
    Import a registry factory given as ``package.module:function``.

    Without a spec the mediator serves an empty registry.

    Raises:
        ValueError: malformed spec or the target is not callable
        ImportError: the module cannot be imported
    """
    if not spec:
        return ToolRegistry

    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Tool factory must look like 'package.module:function', got '{spec}'")

    module = importlib.import_module(module_name)
    factory = getattr(module, attr, None)
    if factory is None or not callable(factory):
        raise ValueError(f"'{attr}' in module '{module_name}' is not a callable registry factory")
    return factory


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mcp-mediator",
        description="Serve caller-supplied tools over MCP (JSON-RPC 2.0 over HTTP).",
    )
    parser.add_argument("--config", default=None, help="Path to YAML configuration (default: built-in defaults)")
    parser.add_argument("--tools", default=None, help="Registry factory as package.module:function")
    parser.add_argument("--host", default=None, help="Override server.host")
    parser.add_argument("--port", type=int, default=None, help="Override server.port")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = ConfigManager().load_config(args.config) if args.config else Config()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    if args.host:
        config.server.host = args.host
    if args.port is not None:
        config.server.port = args.port

    if args.verbose or config.server.debug:
        setup_logging(LogLevel.DEBUG, include_source_location=True,
                      format_json=config.logging.format_json)
    else:
        configure_from_dict(config.logging.model_dump())

    try:
        factory = load_registry_factory(args.tools)
    except (ImportError, ValueError) as e:
        logger.error(f"Cannot load tool registry factory: {e}")
        return 2

    mediator = McpMediator(factory, config=config.mcp, log_event=logging_event_sink())
    server = McpHttpServer(
        mediator,
        host=config.server.host,
        port=config.server.port,
        path=config.server.path,
        request_timeout_sec=config.server.request_timeout_sec,
    )

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())

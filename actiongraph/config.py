"""
actiongraph Configuration Module

Centralized configuration from environment variables.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_TRUTHY = ("true", "1", "yes")


@dataclass
class ExecutionSettings:
    """Executor behaviour toggles."""
    trace_nodes: bool = False
    snapshot_args: bool = True
    log_failures: bool = True


@dataclass
class ActionGraphConfig:
    """Main configuration container."""
    execution: ExecutionSettings
    debug: bool = False
    log_level: str = "INFO"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in _TRUTHY


def load_config() -> ActionGraphConfig:
    """
    Load configuration from environment variables.

    Environment Variables:
        ACTIONGRAPH_TRACE_NODES: Log every node start/finish (default: false)
        ACTIONGRAPH_SNAPSHOT_ARGS: Copy shared args onto nodes before invocation (default: true)
        ACTIONGRAPH_LOG_FAILURES: Log rejected runs with traceback (default: true)
        ACTIONGRAPH_DEBUG: Enable debug mode (default: false)
        ACTIONGRAPH_LOG_LEVEL: Log level (default: INFO)
    """
    execution = ExecutionSettings(
        trace_nodes=_env_flag("ACTIONGRAPH_TRACE_NODES", "false"),
        snapshot_args=_env_flag("ACTIONGRAPH_SNAPSHOT_ARGS", "true"),
        log_failures=_env_flag("ACTIONGRAPH_LOG_FAILURES", "true"),
    )

    return ActionGraphConfig(
        execution=execution,
        debug=_env_flag("ACTIONGRAPH_DEBUG", "false"),
        log_level=os.getenv("ACTIONGRAPH_LOG_LEVEL", "INFO").upper(),
    )


# Singleton config instance
_config: Optional[ActionGraphConfig] = None


def get_config() -> ActionGraphConfig:
    """Get the global configuration (lazy-loaded singleton)."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset configuration (useful for testing)."""
    global _config
    _config = None


def configure_logging(config: Optional[ActionGraphConfig] = None) -> None:
    """Configure root logging from the given (or global) configuration."""
    config = config or get_config()
    level = logging.DEBUG if config.debug else getattr(logging, config.log_level, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)

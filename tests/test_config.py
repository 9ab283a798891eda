"""
actiongraph Configuration Tests
"""

import logging

import pytest

from actiongraph.config import (
    ActionGraphConfig,
    ExecutionSettings,
    configure_logging,
    get_config,
    load_config,
    reset_config,
)
from actiongraph.core.executor import BranchExecutor
from actiongraph.compiler import compile_graph
from actiongraph.schemas.signal import SignalRecord


@pytest.fixture(autouse=True)
def clean_config():
    reset_config()
    yield
    reset_config()


class TestConfiguration:
    """Environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        for name in (
            "ACTIONGRAPH_TRACE_NODES",
            "ACTIONGRAPH_SNAPSHOT_ARGS",
            "ACTIONGRAPH_LOG_FAILURES",
            "ACTIONGRAPH_DEBUG",
            "ACTIONGRAPH_LOG_LEVEL",
        ):
            monkeypatch.delenv(name, raising=False)

        config = load_config()

        assert config.execution.trace_nodes is False
        assert config.execution.snapshot_args is True
        assert config.execution.log_failures is True
        assert config.debug is False
        assert config.log_level == "INFO"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("ACTIONGRAPH_TRACE_NODES", "yes")
        monkeypatch.setenv("ACTIONGRAPH_SNAPSHOT_ARGS", "0")
        monkeypatch.setenv("ACTIONGRAPH_LOG_FAILURES", "false")
        monkeypatch.setenv("ACTIONGRAPH_DEBUG", "TRUE")
        monkeypatch.setenv("ACTIONGRAPH_LOG_LEVEL", "warning")

        config = load_config()

        assert config.execution.trace_nodes is True
        assert config.execution.snapshot_args is False
        assert config.execution.log_failures is False
        assert config.debug is True
        assert config.log_level == "WARNING"

    def test_get_config_is_cached(self, monkeypatch):
        monkeypatch.setenv("ACTIONGRAPH_TRACE_NODES", "true")
        first = get_config()
        monkeypatch.setenv("ACTIONGRAPH_TRACE_NODES", "false")

        assert get_config() is first
        assert get_config().execution.trace_nodes is True

        reset_config()
        assert get_config().execution.trace_nodes is False

    def test_executor_reads_global_config(self, monkeypatch):
        monkeypatch.setenv("ACTIONGRAPH_SNAPSHOT_ARGS", "false")
        tree = compile_graph([])
        signal = SignalRecord(args={}, branches=tree.branches)

        executor = BranchExecutor(tree, None, signal)

        assert executor._snapshot_args is False

    def test_configure_logging(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

        configure_logging(ActionGraphConfig(execution=ExecutionSettings(), log_level="WARNING"))
        configure_logging(ActionGraphConfig(execution=ExecutionSettings(), debug=True))

        assert calls[0]["level"] == logging.WARNING
        assert calls[1]["level"] == logging.DEBUG
        assert "%(name)s" in calls[0]["format"]

"""
Shared fixtures for the Digital Tools tests.
"""

import pytest

from digital_tools.config import Config, reset_config, set_config
from digital_tools.tools import (
    ToolExecutor,
    ToolRegistry,
    register_builtin_tools,
    reset_executor,
    reset_registry,
)


@pytest.fixture(autouse=True)
def isolated_globals(tmp_path, monkeypatch):
    """Keep global config, registry and executor out of the user's home."""
    for var in (
        "DIGITAL_TOOLS_STRICT",
        "DIGITAL_TOOLS_CONFIRMATION_TTL",
        "DIGITAL_TOOLS_LOG_LEVEL",
        "DIGITAL_TOOLS_DEFAULT_CALLER",
    ):
        monkeypatch.delenv(var, raising=False)

    set_config(Config(data_dir=tmp_path / "data"))
    reset_registry()
    reset_executor()
    yield
    reset_executor()
    reset_registry()
    reset_config()


@pytest.fixture
def config(tmp_path):
    return Config(data_dir=tmp_path / "data")


@pytest.fixture
def registry():
    return ToolRegistry(name="test")


@pytest.fixture
def builtin_registry():
    registry = ToolRegistry(name="builtin")
    register_builtin_tools(registry)
    return registry


@pytest.fixture
def executor(builtin_registry, config):
    return ToolExecutor(builtin_registry, config=config)

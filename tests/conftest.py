from __future__ import annotations

from importlib import resources
from pathlib import Path

import pytest
from typer.testing import CliRunner

from adapter_registry.cli.main import app
from adapter_registry.core import ExecutionContext
from adapter_registry.services import build_default_registry


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    monkeypatch.delenv("ADAPTER_REGISTRY_ENVIRONMENTS", raising=False)
    monkeypatch.delenv("ADAPTER_REGISTRY_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session")
def wallet_declarations() -> Path:
    with resources.as_file(resources.files("adapter_registry.resources.registry") / "wallet.yaml") as ref:
        return Path(ref)


@pytest.fixture()
def registry():
    return build_default_registry()


@pytest.fixture()
def server_context() -> ExecutionContext:
    return ExecutionContext(environments=("server",))


@pytest.fixture()
def browser_context() -> ExecutionContext:
    return ExecutionContext(environments=("browser",))


@pytest.fixture()
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def cli_app():
    return app

"""Shared test fixtures for specref.

Provides reusable fixtures for building in-memory remote document sets,
creating isolated config environments, managing output state, and running
CLI commands. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional, Union

import pytest
import yaml

from specref.models import SpecNode
from specref.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"

RemoteValue = Union[str, None, Exception]


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_logging_between_tests() -> None:
    """Drop handlers that configure_logging bound to captured streams."""
    yield
    logger = logging.getLogger("specref")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# In-memory remote documents
# ---------------------------------------------------------------------------


class FakeRemote:
    """Async resolver serving documents from a dict and recording every call.

    Values may be document text, ``None`` (not found), or an exception
    instance that is raised when the URL is requested.
    """

    def __init__(self, documents: dict[str, RemoteValue]) -> None:
        self.documents = documents
        self.calls: list[str] = []

    async def __call__(self, url: str) -> Optional[str]:
        self.calls.append(url)
        value = self.documents.get(url)
        if isinstance(value, Exception):
            raise value
        return value


def yaml_doc(data: dict[str, Any]) -> str:
    """Serialise *data* as a YAML document."""
    return yaml.safe_dump(data, sort_keys=False)


def ref_doc(*urls: str) -> str:
    """A JSON document whose schemas are ``$ref``s to *urls*, in order."""
    schemas = {f"S{i}": {"$ref": url} for i, url in enumerate(urls)}
    return json.dumps({"components": {"schemas": schemas}})


@pytest.fixture
def make_remote() -> Callable[[dict[str, RemoteValue]], FakeRemote]:
    """Factory for :class:`FakeRemote` resolvers."""
    return FakeRemote


@pytest.fixture
def root_node() -> Callable[..., SpecNode]:
    """Factory building a root :class:`SpecNode` that references *urls*."""

    def _build(*urls: str, file_name: str = "root.json") -> SpecNode:
        return SpecNode(file_name=file_name, content=ref_doc(*urls))

    return _build


@pytest.fixture
def petstore_split_raw() -> str:
    """Raw YAML of the split petstore fixture (references remote files)."""
    return (FIXTURES_DIR / "petstore_split.yaml").read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config. Clears all SPECREF_* environment variables and changes
    the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("specref.config._is_xdg_platform", lambda: True)

    for var in ["SPECREF_ORIGIN", "SPECREF_TIMEOUT", "SPECREF_NO_CACHE"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet PLAIN-format OutputManager for the duration of a test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()

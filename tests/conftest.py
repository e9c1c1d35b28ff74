"""Shared test fixtures for specgen.

Provides reusable fixtures for loading spec fixtures, building schema nodes,
creating isolated config environments, managing output state, and running
CLI commands. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator

import pytest

from specgen.assembler import EndpointAssembler
from specgen.models import GeneratorConfig, ParsedSpec
from specgen.output import OutputFormat, OutputManager, reset_output, set_output
from specgen.typegraph.builder import ModelBuilder
from specgen.typegraph.model import GenerationResult
from specgen.typegraph.registry import TypeRegistry

FIXTURES_DIR = Path(__file__).parent / "fixtures"
GITHUB_LIKE = FIXTURES_DIR / "github_like.json"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> Iterator[None]:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Spec fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def github_raw() -> dict[str, Any]:
    """Raw GitHub-like spec dict."""
    with open(GITHUB_LIKE, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def github_spec(github_raw: dict[str, Any]) -> ParsedSpec:
    """Parsed GitHub-like spec."""
    from specgen.parser.extractor import extract_spec

    return extract_spec(github_raw, "3.0.3")


@pytest.fixture
def github_result(github_spec: ParsedSpec) -> GenerationResult:
    """Fully resolved generation result for the GitHub-like spec."""
    return EndpointAssembler(GeneratorConfig()).build(github_spec)


# ---------------------------------------------------------------------------
# Type-graph fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def builder() -> ModelBuilder:
    return ModelBuilder()


@pytest.fixture
def make_registry(builder: ModelBuilder):
    """Factory for a registry over a ``{pointer: SchemaNode}`` table.

    Uses an empty package so qualified names equal simple names.
    """

    def _make(schemas: dict | None = None, package: str = "") -> TypeRegistry:
        return TypeRegistry(schemas or {}, builder, package)

    return _make


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config, forces the XDG layout, clears
    all SPECGEN_* environment variables, and changes the working directory
    to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("specgen.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ["SPECGEN_MODEL_PACKAGE", "SPECGEN_ENDPOINT_PACKAGE"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> Iterator[OutputManager]:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    ``result.output`` carries stderr diagnostics too; tests that parse the
    JSON document pass ``--quiet`` so that only the data is printed.
    """
    from typer.testing import CliRunner

    return CliRunner()

"""Tests for specgen.pipeline."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from specgen.exceptions import SpecParseError
from specgen.models import GeneratorConfig
from specgen.naming import DefaultNamer
from specgen.pipeline import generate_from_source, parse_source

FIXTURE = str(Path(__file__).parent / "fixtures" / "github_like.json")


class TestParseSource:
    def test_parses_fixture(self) -> None:
        spec = parse_source(FIXTURE)
        assert spec.info.title == "GitHub-like API"
        assert spec.openapi_version == "3.0.3"
        assert len(spec.operations) == 17

    def test_rejects_non_openapi(self, tmp_path: Path) -> None:
        path = tmp_path / "other.json"
        path.write_text(json.dumps({"hello": "world"}), encoding="utf-8")
        with pytest.raises(SpecParseError):
            parse_source(str(path))


class TestGenerateFromSource:
    def test_default_config(self) -> None:
        result = generate_from_source(FIXTURE)
        assert len(result.endpoints) == 7
        assert len(result.classes) == 28

    def test_custom_config_and_namer(self) -> None:
        class UpperNamer(DefaultNamer):
            def type_name(self, text: str) -> str:
                return super().type_name(text).upper()

        result = generate_from_source(
            FIXTURE,
            GeneratorConfig(model_package="m", endpoint_package="e"),
            UpperNamer(),
        )
        assert all(c.name.startswith("m.") for c in result.classes)
        assert all(e.name.startswith("e.") for e in result.endpoints)
        assert result.classes[0].name == "m.GETANORGANIZATION"

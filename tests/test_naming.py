"""Tests for specgen.naming."""

from __future__ import annotations

import pytest

from specgen.naming import DefaultNamer


@pytest.fixture
def namer() -> DefaultNamer:
    return DefaultNamer()


class TestTypeName:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("List organization members", "ListOrganizationMembers"),
            ("actions-client", "ActionsClient"),
            ("simple_user", "SimpleUser"),
            ("organization-full", "OrganizationFull"),
            ("Get GitHub meta information", "GetGitHubMetaInformation"),
            ("HTMLParser", "HTMLParser"),
            ("Download a repository archive (zip)", "DownloadARepositoryArchiveZip"),
            ("OrganizationFullPlan", "OrganizationFullPlan"),
        ],
    )
    def test_pascal_case(self, namer: DefaultNamer, text: str, expected: str) -> None:
        assert namer.type_name(text) == expected

    def test_empty(self, namer: DefaultNamer) -> None:
        assert namer.type_name("") == "Unnamed"
        assert namer.type_name("--") == "Unnamed"

    def test_leading_digit(self, namer: DefaultNamer) -> None:
        assert namer.type_name("2fa settings") == "_2faSettings"

    def test_stable_on_own_output(self, namer: DefaultNamer) -> None:
        once = namer.type_name("list public events")
        assert namer.type_name(once) == once


class TestVariableName:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("List organization members", "listOrganizationMembers"),
            ("Get GitHub meta information", "getGitHubMetaInformation"),
            ("Follow a user", "followAUser"),
            ("URL", "url"),
            ("per_page", "perPage"),
        ],
    )
    def test_camel_case(self, namer: DefaultNamer, text: str, expected: str) -> None:
        assert namer.variable_name(text) == expected

    @pytest.mark.parametrize("word", ["class", "Default", "import", "delete"])
    def test_reserved_words_escaped(self, namer: DefaultNamer, word: str) -> None:
        assert namer.variable_name(word) == f"{word.lower()}_"

    def test_empty(self, namer: DefaultNamer) -> None:
        assert namer.variable_name("") == "unnamed"

    def test_leading_digit(self, namer: DefaultNamer) -> None:
        assert namer.variable_name("3 things") == "_3Things"

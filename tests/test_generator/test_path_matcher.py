"""Tests for openapi_cli.generator.path_matcher."""

from __future__ import annotations

import pytest

from openapi_cli.generator.path_matcher import (
    PathPattern,
    check_ambiguity,
    convert_to_regex,
    match_path,
)
from openapi_cli.models import PathMatch


class TestConvertToRegex:
    def test_named_group(self) -> None:
        match = convert_to_regex("/projects/{id}").match("/projects/42")
        assert match is not None
        assert match.group("id") == "42"

    def test_placeholder_does_not_span_segments(self) -> None:
        assert convert_to_regex("/projects/{id}").match("/projects/42/extra") is None

    def test_trailing_slash_is_optional(self) -> None:
        assert convert_to_regex("/projects/{id}").match("/projects/42/") is not None

    def test_static_text_is_escaped(self) -> None:
        pattern = convert_to_regex("/v1.0/items")
        assert pattern.match("/v1.0/items") is not None
        assert pattern.match("/v1x0/items") is None

    @pytest.mark.parametrize(
        ("template", "values"),
        [
            ("/projects/{project_id}/errors", {"project_id": "p-1"}),
            ("/teams/{team_id}/users/{user_id}", {"team_id": "t1", "user_id": "u 2"}),
            ("/{a}/{b}/{c}", {"a": "x", "b": "y.json", "c": "%41"}),
        ],
    )
    def test_substituted_template_round_trips(self, template: str, values: dict) -> None:
        concrete = template
        for name, value in values.items():
            concrete = concrete.replace("{" + name + "}", value)

        match = convert_to_regex(template).match(concrete)

        assert match is not None
        assert match.groupdict() == values


class TestPathPattern:
    def test_non_identifier_parameter_names(self) -> None:
        pattern = PathPattern("/files/{file-name}")
        assert pattern.match("/files/report.pdf") == {"file-name": "report.pdf"}
        assert "p0" in pattern.groups

    def test_no_match_returns_none(self) -> None:
        assert PathPattern("/files/{name}").match("/folders/x") is None


class TestMatchPath:
    """Test matching concrete paths against every template."""

    def test_exact_match_sorts_first(self) -> None:
        spec_paths = {"/projects/{id}": ["get"], "/projects/active": ["get"]}

        matches = match_path("projects/active", spec_paths)

        assert [m.path for m in matches] == ["/projects/active", "/projects/{id}"]
        assert matches[0].is_exact is True
        assert matches[0].parameters == {}
        assert matches[1].is_exact is False
        assert matches[1].parameters == {"id": "active"}

    def test_methods_are_uppercased(self) -> None:
        matches = match_path("/projects/42/", {"/projects/{id}": ["get", "delete"]})

        assert len(matches) == 1
        assert matches[0].methods == ["GET", "DELETE"]
        assert matches[0].parameters == {"id": "42"}

    def test_no_match(self) -> None:
        assert match_path("teams", {"/projects": ["get"]}) == []

    def test_declaration_order_kept_within_group(self) -> None:
        spec_paths = {"/a/{x}": ["get"], "/a/{y}": ["post"]}
        matches = match_path("a/1", spec_paths)
        assert [m.path for m in matches] == ["/a/{x}", "/a/{y}"]


class TestCheckAmbiguity:
    def test_single_match_is_not_ambiguous(self) -> None:
        match = PathMatch(path="/a", methods=["GET"], is_exact=True)
        assert check_ambiguity([match], "openapi-cli") == (False, None)

    def test_no_match_is_not_ambiguous(self) -> None:
        assert check_ambiguity([], "openapi-cli") == (False, None)

    def test_several_matches_list_candidates(self) -> None:
        matches = [
            PathMatch(path="/a/{x}", methods=["GET"]),
            PathMatch(path="/a/{y}", methods=["POST", "PUT"]),
        ]

        is_ambiguous, message = check_ambiguity(matches, "openapi-cli shop")

        assert is_ambiguous is True
        assert message is not None
        assert "Ambiguous endpoint" in message
        assert "  /a/{x} (GET)" in message
        assert "  /a/{y} (POST, PUT)" in message
        assert "Example: openapi-cli shop call <path> --method POST" in message

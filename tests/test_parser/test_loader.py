"""Tests for openapi_cli.parser.loader."""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from openapi_cli.cache import SpecCache
from openapi_cli.exceptions import (
    SpecNotFoundError,
    SpecParseError,
    SpecUnreadableError,
    UnsupportedFormatError,
)
from openapi_cli.parser.loader import (
    detect_remote_format,
    is_url,
    load_document,
    load_spec,
    parse_content,
    validate_openapi_version,
)

_SPEC_YAML = "openapi: 3.0.0\ninfo:\n  title: Remote\n  version: '1'\npaths: {}\n"


# ---------------------------------------------------------------------------
# Local files
# ---------------------------------------------------------------------------


class TestLoadDocument:
    """Test loading local JSON and YAML files."""

    def test_yaml_file(self, projects_spec_path: str) -> None:
        document = load_document(projects_spec_path)
        assert document["info"]["title"] == "Projects API"

    def test_json_file(self, teams_spec_path: str) -> None:
        document = load_document(teams_spec_path)
        assert document["openapi"] == "3.1.0"

    def test_yml_extension(self, tmp_path: Path) -> None:
        spec = tmp_path / "api.yml"
        spec.write_text(_SPEC_YAML)
        assert load_document(spec)["info"]["title"] == "Remote"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SpecNotFoundError, match="Spec file not found"):
            load_document(tmp_path / "missing.yaml")

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        spec = tmp_path / "api.txt"
        spec.write_text(_SPEC_YAML)

        with pytest.raises(UnsupportedFormatError, match="Unsupported file format: txt"):
            load_document(spec)

    def test_invalid_json(self, tmp_path: Path) -> None:
        spec = tmp_path / "api.json"
        spec.write_text("{not json")

        with pytest.raises(SpecParseError, match="Invalid JSON"):
            load_document(spec)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        spec = tmp_path / "api.yaml"
        spec.write_text("key: [unclosed\n")

        with pytest.raises(SpecParseError, match="Invalid YAML"):
            load_document(spec)

    def test_root_must_be_mapping(self, tmp_path: Path) -> None:
        spec = tmp_path / "api.json"
        spec.write_text(json.dumps([1, 2]))

        with pytest.raises(SpecParseError, match="got list"):
            load_document(spec)

    def test_empty_document(self, tmp_path: Path) -> None:
        spec = tmp_path / "api.yaml"
        spec.write_text("")

        with pytest.raises(SpecParseError, match="empty document"):
            load_document(spec)


class TestParseContent:
    def test_json(self) -> None:
        assert parse_content('{"a": 1}', "json") == {"a": 1}

    def test_source_in_message(self) -> None:
        with pytest.raises(SpecParseError, match="in https://x.test/spec"):
            parse_content("[1]", "yaml", source="https://x.test/spec")


# ---------------------------------------------------------------------------
# Remote documents
# ---------------------------------------------------------------------------


class TestDetectRemoteFormat:
    """Test the URL / header / content sniffing order."""

    def test_extension_wins(self) -> None:
        assert detect_remote_format("https://x.test/spec.json?v=2", "text/yaml", "a: 1") == "json"

    def test_yaml_extension(self) -> None:
        assert detect_remote_format("https://x.test/spec.yml", None, "{}") == "yaml"

    def test_content_type_json(self) -> None:
        assert detect_remote_format("https://x.test/spec", "application/json; charset=utf-8", "") == "json"

    def test_content_type_yaml(self) -> None:
        assert detect_remote_format("https://x.test/spec", "application/x-yaml", "{}") == "yaml"

    def test_first_character(self) -> None:
        assert detect_remote_format("https://x.test/spec", "text/plain", '  {"openapi": "3.0.0"}') == "json"

    def test_defaults_to_yaml(self) -> None:
        assert detect_remote_format("https://x.test/spec", None, "openapi: 3.0.0") == "yaml"


class TestLoadSpecRemote:
    """Test fetching specs over HTTP with an injected transport."""

    def test_fetches_and_parses(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text=_SPEC_YAML))

        document = load_spec("https://x.test/openapi", transport=transport)

        assert document["info"]["title"] == "Remote"

    def test_http_error_status(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(404))

        with pytest.raises(SpecUnreadableError, match="HTTP 404"):
            load_spec("https://x.test/openapi.yaml", transport=transport)

    def test_connection_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(SpecUnreadableError, match="Failed to fetch spec"):
            load_spec("https://x.test/openapi.yaml", transport=httpx.MockTransport(handler))

    def test_cache_hit_skips_fetch(self, tmp_path: Path) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, text=_SPEC_YAML)

        cache = SpecCache(tmp_path)
        try:
            transport = httpx.MockTransport(handler)
            first = load_spec("https://x.test/openapi", cache=cache, transport=transport)
            second = load_spec("https://x.test/openapi", cache=cache, transport=transport)
        finally:
            cache.close()

        assert first == second
        assert len(calls) == 1

    def test_without_cache_refetches(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, text=_SPEC_YAML)

        transport = httpx.MockTransport(handler)
        load_spec("https://x.test/openapi", transport=transport)
        load_spec("https://x.test/openapi", transport=transport)

        assert len(calls) == 2


def test_is_url() -> None:
    assert is_url("https://x.test/spec.yaml")
    assert is_url("http://x.test/spec.yaml")
    assert not is_url("/tmp/spec.yaml")
    assert not is_url("ftp://x.test/spec.yaml")


# ---------------------------------------------------------------------------
# Version validation
# ---------------------------------------------------------------------------


class TestValidateOpenapiVersion:
    def test_openapi_30(self) -> None:
        assert validate_openapi_version({"openapi": "3.0.3"}) == "3.0.3"

    def test_openapi_31(self) -> None:
        assert validate_openapi_version({"openapi": "3.1.0"}) == "3.1.0"

    def test_swagger_rejected(self) -> None:
        with pytest.raises(SpecParseError, match="Swagger 2.0 is not supported"):
            validate_openapi_version({"swagger": "2.0"})

    def test_missing_version(self) -> None:
        with pytest.raises(SpecParseError, match="Missing 'openapi' field"):
            validate_openapi_version({"info": {}})

    def test_other_major_version(self) -> None:
        with pytest.raises(SpecParseError, match="Unsupported OpenAPI version: 4.0"):
            validate_openapi_version({"openapi": "4.0"})

"""Load OpenAPI documents from a local file or an http(s) URL.

This module handles all I/O for fetching raw OpenAPI documents and converting
them into Python dictionaries.

* Local files are parsed according to their extension: ``.json`` with
  :mod:`json`, ``.yaml`` / ``.yml`` with PyYAML's ``safe_load``.  Any other
  extension is rejected.
* Remote documents are fetched with :mod:`httpx`.  Their format is detected
  from the URL extension, then the ``Content-Type`` header, then the first
  non-blank character, and defaults to YAML.  Fetched content can be cached
  in a :class:`~openapi_cli.cache.SpecCache`.

The public functions are:

* :func:`load_spec` -- Load and parse a spec from a file path or URL.
* :func:`load_document` -- Load and parse a local file.
* :func:`validate_openapi_version` -- Reject Swagger 2.x and non-3.x documents.

After loading, the raw dict is handed to
:class:`~openapi_cli.parser.query.OpenApiParser`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

import httpx
import yaml

from openapi_cli.cache import SpecCache
from openapi_cli.exceptions import (
    SpecNotFoundError,
    SpecParseError,
    SpecUnreadableError,
    UnsupportedFormatError,
)
from openapi_cli.models import DEFAULT_CACHE_TTL, DEFAULT_TIMEOUT
from openapi_cli.output import get_output

_EXTENSION_FORMATS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}


def is_url(source: str) -> bool:
    """Return ``True`` when *source* is an http(s) URL."""
    return source.startswith(("http://", "https://"))


def load_spec(
    source: str,
    cache: Optional[SpecCache] = None,
    ttl_seconds: int = DEFAULT_CACHE_TTL,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.BaseTransport] = None,
) -> dict[str, Any]:
    """Load an OpenAPI spec from a URL or a file path.

    Args:
        source: An http(s) URL or a local file path.
        cache: Optional cache for remote documents.  Ignored for files.
        ttl_seconds: Lifetime of a cached remote document.
        timeout: Timeout for fetching a remote document.
        transport: Optional :class:`httpx.BaseTransport` used for the fetch
            (tests pass an :class:`httpx.MockTransport`).

    Returns:
        The parsed spec as a dictionary.

    Raises:
        SpecLoadError: If the source cannot be found, read, or parsed.
    """
    if is_url(source):
        return _load_from_url(source, cache, ttl_seconds, timeout, transport)
    return load_document(source)


def load_document(path: str | Path) -> dict[str, Any]:
    """Load a spec from a local JSON or YAML file.

    Args:
        path: Path to the local file.

    Returns:
        The parsed spec dictionary.

    Raises:
        SpecNotFoundError: If the file does not exist.
        UnsupportedFormatError: If the extension is not ``.json``,
            ``.yaml`` or ``.yml``.
        SpecUnreadableError: If the file cannot be read.
        SpecParseError: If the content is malformed or not a mapping.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecNotFoundError(f"Spec file not found: {path}")

    suffix = file_path.suffix.lower()
    fmt = _EXTENSION_FORMATS.get(suffix)
    if fmt is None:
        raise UnsupportedFormatError(
            f"Unsupported file format: {suffix.lstrip('.') or '(none)'}. "
            "Only YAML and JSON are supported."
        )

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecUnreadableError(f"Failed to read spec file {path}: {exc}") from exc

    return parse_content(content, fmt, source=str(path))


def _load_from_url(
    url: str,
    cache: Optional[SpecCache],
    ttl_seconds: int,
    timeout: float,
    transport: Optional[httpx.BaseTransport],
) -> dict[str, Any]:
    """Fetch a spec from *url*, going through *cache* when given."""
    output = get_output()
    key = SpecCache.key_for(url)

    if cache is not None:
        cached = cache.get(key)
        if cached is not None:
            output.debug(f"Spec cache hit: {url}")
            return parse_content(cached["content"], cached["format"], source=url)

    output.debug(f"Fetching spec: {url}")
    try:
        with httpx.Client(transport=transport, timeout=timeout, follow_redirects=True) as client:
            response = client.get(url)
    except httpx.HTTPError as exc:
        raise SpecUnreadableError(f"Failed to fetch spec from {url}: {exc}") from exc

    if response.status_code >= 400:
        raise SpecUnreadableError(
            f"Failed to fetch remote spec from {url}: HTTP {response.status_code}"
        )

    content = response.text
    fmt = detect_remote_format(url, response.headers.get("content-type"), content)
    document = parse_content(content, fmt, source=url)

    if cache is not None:
        cache.put(key, {"content": content, "format": fmt}, ttl_seconds)

    return document


def detect_remote_format(url: str, content_type: Optional[str], content: str) -> str:
    """Decide whether remote content is JSON or YAML.

    Checks, in order: the URL path extension (query string ignored), the
    ``Content-Type`` header, and the first non-blank character of the
    content.  Defaults to ``"yaml"``.

    Args:
        url: The URL the content came from.
        content_type: The response ``Content-Type`` header, if any.
        content: The response body.

    Returns:
        ``"json"`` or ``"yaml"``.
    """
    suffix = Path(urlparse(url).path).suffix.lower()
    if suffix in _EXTENSION_FORMATS:
        return _EXTENSION_FORMATS[suffix]

    if content_type:
        lowered = content_type.lower()
        if "json" in lowered:
            return "json"
        if "yaml" in lowered or "yml" in lowered:
            return "yaml"

    stripped = content.lstrip()
    if stripped[:1] in ("{", "["):
        return "json"

    return "yaml"


def parse_content(content: str, fmt: str, source: str = "") -> dict[str, Any]:
    """Parse *content* as ``fmt`` and check that the root is a mapping.

    Args:
        content: The raw document text.
        fmt: ``"json"`` or ``"yaml"``.
        source: File path or URL used in error messages.

    Returns:
        The parsed dictionary.

    Raises:
        SpecParseError: If parsing fails or the root is not a mapping.
    """
    where = f" in {source}" if source else ""
    try:
        if fmt == "json":
            result = json.loads(content)
        else:
            result = yaml.safe_load(content)
    except json.JSONDecodeError as exc:
        raise SpecParseError(f"Invalid JSON{where}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise SpecParseError(f"Invalid YAML{where}: {exc}") from exc

    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"Spec must be a JSON/YAML object (got {kind}){where}")
    return result


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Validate and return the OpenAPI version string.

    Args:
        spec: The parsed spec dictionary.

    Returns:
        The OpenAPI version string (e.g., ``'3.0.3'``, ``'3.1.0'``).

    Raises:
        SpecParseError: If the version is missing, not 3.x, or the document
            is Swagger 2.x.
    """
    if "swagger" in spec:
        raise SpecParseError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.x documents are supported."
        )

    openapi_version = spec.get("openapi")
    if openapi_version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(openapi_version)
    if not version_str.startswith("3."):
        raise SpecParseError(
            f"Unsupported OpenAPI version: {version_str}. Only OpenAPI 3.x is supported."
        )
    return version_str

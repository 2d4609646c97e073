"""Read-only query facade over an OpenAPI document.

:class:`OpenApiParser` answers every question the planner and the executor
ask about a spec: which paths and verbs exist, what parameters an operation
takes, which content types its request body and responses declare, and
where the API lives.

Structural objects (path items, operations, parameters, request bodies,
responses, media types) are dereferenced on demand with
:meth:`~openapi_cli.parser.resolver.RefResolver.dereference`, and each
parameter object is fully resolved before it is read.  Schemas are only
expanded when explicitly requested (:meth:`OpenApiParser.request_body_schema`),
so self-referential component schemas do not stop commands from being built.

Parameter merging follows the OpenAPI specification: path-item parameters
provide defaults, and operation-level parameters override them when they
share the same ``name`` and ``in`` values.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from openapi_cli.cache import SpecCache
from openapi_cli.models import DEFAULT_CACHE_TTL, HTTPMethod, PathParameter, QueryParameter
from openapi_cli.parser.loader import load_spec, validate_openapi_version
from openapi_cli.parser.resolver import RefResolver

# Verbs that become commands, in canonical order.
_HTTP_METHODS = frozenset(m.value for m in HTTPMethod)


class OpenApiParser:
    """Query facade over one OpenAPI 3.x document.

    All queries are read-only and tolerate missing optional data: absent
    fields yield ``None`` or empty collections.

    Args:
        document: The raw document tree.  It is never mutated.

    Example::

        parser = OpenApiParser.from_source("openapi.yaml")
        for path, methods in parser.paths_with_methods().items():
            ...
    """

    def __init__(self, document: dict[str, Any]) -> None:
        self._document = document
        self._resolver = RefResolver(document)

    @classmethod
    def from_source(
        cls,
        source: str,
        cache: Optional[SpecCache] = None,
        ttl_seconds: int = DEFAULT_CACHE_TTL,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> OpenApiParser:
        """Load, validate, and wrap a spec from a file path or URL.

        Raises:
            SpecLoadError: If the document cannot be loaded or is not OpenAPI 3.x.
        """
        document = load_spec(source, cache=cache, ttl_seconds=ttl_seconds, transport=transport)
        validate_openapi_version(document)
        return cls(document)

    @property
    def document(self) -> dict[str, Any]:
        """The raw document tree."""
        return self._document

    @property
    def resolver(self) -> RefResolver:
        """The :class:`RefResolver` bound to this document."""
        return self._resolver

    # ------------------------------------------------------------------ #
    # Document-level queries
    # ------------------------------------------------------------------ #

    def title(self) -> Optional[str]:
        """The ``info.title`` of the API."""
        info = self._document.get("info")
        if isinstance(info, dict) and isinstance(info.get("title"), str):
            return info["title"]
        return None

    def server_url(self) -> Optional[str]:
        """The first ``servers[].url``, or ``None`` when absent or empty."""
        servers = self._document.get("servers")
        if not isinstance(servers, list) or not servers:
            return None
        first = self._resolver.dereference(servers[0])
        if isinstance(first, dict) and isinstance(first.get("url"), str):
            return first["url"]
        return None

    def paths(self) -> dict[str, dict[str, dict[str, Any]]]:
        """Return ``{template: {verb: operation}}`` for the supported verbs.

        Verbs are restricted to get, post, put, patch and delete and kept in
        declaration order.
        """
        result: dict[str, dict[str, dict[str, Any]]] = {}
        raw_paths = self._document.get("paths")
        if not isinstance(raw_paths, dict):
            return result

        for template, raw_item in raw_paths.items():
            item = self._resolver.dereference(raw_item)
            if not isinstance(item, dict):
                continue
            operations: dict[str, dict[str, Any]] = {}
            for verb, raw_operation in item.items():
                if verb not in _HTTP_METHODS:
                    continue
                operation = self._resolver.dereference(raw_operation)
                if isinstance(operation, dict):
                    operations[verb] = operation
            if operations:
                result[str(template)] = operations
        return result

    def paths_with_methods(self) -> dict[str, list[str]]:
        """Return ``{template: [verb, ...]}`` in declaration order."""
        return {path: list(operations) for path, operations in self.paths().items()}

    # ------------------------------------------------------------------ #
    # Operation-level queries
    # ------------------------------------------------------------------ #

    def operation(self, path: str, method: str) -> dict[str, Any]:
        """Return the operation object with merged parameters.

        Path-item ``parameters`` are merged in; operation-level parameters
        win on ``(name, in)``.  Each parameter is fully resolved.

        Returns:
            The operation dict (a shallow copy), or an empty dict when the
            path or verb does not exist.
        """
        raw_paths = self._document.get("paths")
        if not isinstance(raw_paths, dict):
            return {}
        item = self._resolver.dereference(raw_paths.get(path))
        if not isinstance(item, dict):
            return {}
        operation = self._resolver.dereference(item.get(method.lower()))
        if not isinstance(operation, dict):
            return {}

        merged = dict(operation)
        merged["parameters"] = _merge_parameters(
            self._parameter_list(item.get("parameters")),
            self._parameter_list(operation.get("parameters")),
        )
        return merged

    def operation_summary(self, path: str, method: str) -> Optional[str]:
        """The operation ``summary``, or ``None``."""
        return _optional_str(self.operation(path, method).get("summary"))

    def operation_description(self, path: str, method: str) -> Optional[str]:
        """The operation ``description``, or ``None``."""
        return _optional_str(self.operation(path, method).get("description"))

    def operation_id(self, path: str, method: str) -> Optional[str]:
        """The operation ``operationId``, or ``None``."""
        return _optional_str(self.operation(path, method).get("operationId"))

    def path_parameters(self, path: str, method: str) -> list[PathParameter]:
        """Parameters with ``in: path``.

        ``type`` comes from ``schema.type``, defaulting to ``"string"``; when
        the type is a list its first element is used.  Path parameters are
        always required.
        """
        result: list[PathParameter] = []
        for param in self.operation(path, method).get("parameters", []):
            if param.get("in") != "path":
                continue
            result.append(
                PathParameter(
                    name=str(param.get("name", "")),
                    type=_extract_schema_type(param.get("schema")),
                    required=True,
                    description=_optional_str(param.get("description")),
                )
            )
        return result

    def query_parameters(self, path: str, method: str) -> list[QueryParameter]:
        """Parameters with ``in: query``."""
        result: list[QueryParameter] = []
        for param in self.operation(path, method).get("parameters", []):
            if param.get("in") != "query":
                continue
            result.append(
                QueryParameter(
                    name=str(param.get("name", "")),
                    required=bool(param.get("required", False)),
                    description=_optional_str(param.get("description")),
                )
            )
        return result

    def request_body_schema(self, path: str, method: str) -> Optional[dict[str, Any]]:
        """The fully resolved ``application/json`` request schema, or ``None``."""
        content = self._request_body_content(path, method)
        media = self._resolver.dereference(content.get("application/json"))
        if not isinstance(media, dict) or "schema" not in media:
            return None
        schema = self._resolver.resolve(media["schema"])
        return schema if isinstance(schema, dict) else None

    def request_body_content_types(self, path: str, method: str) -> list[str]:
        """Media types declared by the operation's ``requestBody``."""
        return list(self._request_body_content(path, method))

    def response_content_types(self, path: str, method: str) -> list[str]:
        """Union of response media types across all status codes.

        Kept in declaration order with duplicates removed.
        """
        seen: dict[str, None] = {}
        for response in self._responses(path, method).values():
            content = response.get("content")
            if isinstance(content, dict):
                for media_type in content:
                    seen.setdefault(str(media_type), None)
        return list(seen)

    def response_description(self, path: str, method: str, status: str | int) -> Optional[str]:
        """The ``description`` of the response documented for *status*."""
        response = self._responses(path, method).get(str(status))
        if response is None:
            return None
        return _optional_str(response.get("description"))

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _parameter_list(self, raw: Any) -> list[dict[str, Any]]:
        if not isinstance(raw, list):
            return []
        params = []
        for entry in raw:
            param = self._resolver.resolve(entry)
            if isinstance(param, dict):
                params.append(param)
        return params

    def _request_body_content(self, path: str, method: str) -> dict[str, Any]:
        body = self._resolver.dereference(self.operation(path, method).get("requestBody"))
        if not isinstance(body, dict):
            return {}
        content = body.get("content")
        return content if isinstance(content, dict) else {}

    def _responses(self, path: str, method: str) -> dict[str, dict[str, Any]]:
        raw = self.operation(path, method).get("responses")
        if not isinstance(raw, dict):
            return {}
        result: dict[str, dict[str, Any]] = {}
        for status, raw_response in raw.items():
            response = self._resolver.dereference(raw_response)
            if isinstance(response, dict):
                result[str(status)] = response
        return result


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field), per the OpenAPI spec.
    """
    overridden = {(p.get("name", ""), p.get("in", "")) for p in op_params}
    merged = [p for p in path_params if (p.get("name", ""), p.get("in", "")) not in overridden]
    merged.extend(op_params)
    return merged


def _extract_schema_type(schema: Any) -> str:
    """Extract the type string from a schema object.

    Falls back to ``"string"`` if the type is missing.  OpenAPI 3.1 type
    arrays (e.g. ``["integer", "null"]``) yield their first element.
    """
    if not isinstance(schema, dict):
        return "string"
    type_value = schema.get("type", "string")
    if isinstance(type_value, list):
        return str(type_value[0]) if type_value else "string"
    return str(type_value)


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value != "" else None

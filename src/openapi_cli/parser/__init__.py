"""OpenAPI spec parser -- load documents, resolve ``$ref`` pointers, query operations.

This sub-package is the first half of the openapi-cli pipeline: turning an
OpenAPI 3.x document (JSON or YAML, local file or remote URL) into an
:class:`OpenApiParser` the planner and executor can query.

Typical usage::

    from openapi_cli.parser import OpenApiParser

    parser = OpenApiParser.from_source("https://api.example.com/openapi.yaml")
    parser.paths_with_methods()

Sub-modules:

* :mod:`~openapi_cli.parser.loader` -- I/O layer (file, URL, cache), format
  detection, and OpenAPI version validation.
* :mod:`~openapi_cli.parser.resolver` -- ``$ref`` resolution with a depth
  bound.
* :mod:`~openapi_cli.parser.query` -- the read-only query facade.
"""

from openapi_cli.parser.loader import load_document, load_spec, validate_openapi_version
from openapi_cli.parser.query import OpenApiParser
from openapi_cli.parser.resolver import RefResolver, resolve_refs

__all__ = [
    "OpenApiParser",
    "RefResolver",
    "load_document",
    "load_spec",
    "resolve_refs",
    "validate_openapi_version",
]

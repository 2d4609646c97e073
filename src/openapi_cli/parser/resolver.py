"""Resolve ``$ref`` JSON Reference pointers in OpenAPI documents.

OpenAPI documents commonly use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/schemas/Pet"}``) to avoid repetition.  This module
replaces them with the referenced objects without touching the input tree:
maps and lists are rebuilt, scalars pass through.

Only **internal** references (those starting with ``#/``) are supported.
Anything else raises
:class:`~openapi_cli.exceptions.UnsupportedReferenceKindError`.

Reference expansion is bounded: a chain of nested expansions deeper than
:data:`MAX_REFERENCE_DEPTH` raises
:class:`~openapi_cli.exceptions.ReferenceCycleError`, so self-referential
schemas fail deterministically instead of exhausting the stack.

Public API:

* :class:`RefResolver` -- resolves nodes of one document.
* :func:`resolve_refs` -- resolves a whole document.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import unquote

from openapi_cli.exceptions import (
    BrokenReferenceError,
    ReferenceCycleError,
    UnsupportedReferenceKindError,
)

MAX_REFERENCE_DEPTH = 100
"""Maximum number of nested ``$ref`` expansions along one branch."""


class RefResolver:
    """Dereference internal JSON pointers against one document.

    Resolution is a pure function of the document: resolving the same node
    twice yields structurally identical output, and resolving an already
    resolved tree returns an equal tree.

    Args:
        document: The root of the OpenAPI document.
        max_depth: Bound on nested ``$ref`` expansions.

    Example::

        resolver = RefResolver(raw)
        operation = resolver.resolve(raw["paths"]["/pets"]["get"])
    """

    def __init__(self, document: dict[str, Any], max_depth: int = MAX_REFERENCE_DEPTH):
        self._document = document
        self._max_depth = max_depth

    def resolve(self, node: Any) -> Any:
        """Return *node* with every ``$ref`` replaced, recursively.

        Args:
            node: Any node of the document (map, list, or scalar).

        Returns:
            A new tree for maps and lists, *node* itself for scalars.

        Raises:
            UnsupportedReferenceKindError: For a ``$ref`` not starting with ``#/``.
            BrokenReferenceError: For a pointer into a missing location.
            ReferenceCycleError: When expansion nests past the depth bound.
        """
        return self._resolve(node, 0)

    def dereference(self, node: Any) -> Any:
        """Follow a chain of ``$ref`` markers at the top of *node* only.

        Children are left untouched. Used by
        :class:`~openapi_cli.parser.query.OpenApiParser` to read structural
        objects (path items, parameters, responses) without expanding their
        schemas.

        Raises:
            UnsupportedReferenceKindError: For a ``$ref`` not starting with ``#/``.
            BrokenReferenceError: For a pointer into a missing location.
            ReferenceCycleError: When the chain is longer than the depth bound.
        """
        depth = 0
        while _is_reference(node):
            ref = node["$ref"]
            depth += 1
            if depth > self._max_depth:
                raise ReferenceCycleError(
                    f"Reference chain deeper than {self._max_depth} at '{ref}'",
                    pointer=ref,
                )
            node = self.lookup(ref)
        return node

    def lookup(self, ref: str) -> Any:
        """Return the raw value a JSON pointer addresses.

        Segments are percent-decoded and then unescaped per :rfc:`6901`
        (``~1`` to ``/``, then ``~0`` to ``~``). Numeric segments index
        into lists.

        Args:
            ref: The ``$ref`` string (e.g., ``"#/components/schemas/Pet"``).

        Returns:
            The value found at the pointer, not resolved further.

        Raises:
            UnsupportedReferenceKindError: If *ref* is not an internal pointer.
            BrokenReferenceError: If any segment is missing or the walk
                reaches a scalar.
        """
        if not ref.startswith("#/"):
            raise UnsupportedReferenceKindError(
                f"External $ref not supported: {ref}. "
                "Only internal references (#/...) are handled.",
                pointer=ref,
            )

        current: Any = self._document
        for raw_segment in ref[2:].split("/"):
            segment = unquote(raw_segment).replace("~1", "/").replace("~0", "~")

            if isinstance(current, dict):
                if segment not in current:
                    raise BrokenReferenceError(
                        f"Cannot resolve $ref '{ref}': key '{segment}' not found",
                        pointer=ref,
                    )
                current = current[segment]
            elif isinstance(current, list):
                try:
                    current = current[int(segment)]
                except (ValueError, IndexError) as exc:
                    raise BrokenReferenceError(
                        f"Cannot resolve $ref '{ref}': invalid array index '{segment}'",
                        pointer=ref,
                    ) from exc
            else:
                raise BrokenReferenceError(
                    f"Cannot resolve $ref '{ref}': "
                    f"cannot navigate into {type(current).__name__}",
                    pointer=ref,
                )

        return current

    def _resolve(self, node: Any, depth: int) -> Any:
        if isinstance(node, dict):
            if _is_reference(node):
                ref = node["$ref"]
                if depth >= self._max_depth:
                    raise ReferenceCycleError(
                        f"Reference expansion deeper than {self._max_depth} at '{ref}' "
                        "(self-referential document?)",
                        pointer=ref,
                    )
                # The pointee may itself contain references.
                return self._resolve(self.lookup(ref), depth + 1)
            return {key: self._resolve(value, depth) for key, value in node.items()}

        if isinstance(node, list):
            return [self._resolve(item, depth) for item in node]

        return node


def resolve_refs(document: dict[str, Any]) -> dict[str, Any]:
    """Resolve every ``$ref`` in *document*.

    Args:
        document: The raw OpenAPI document, as returned by
            :func:`~openapi_cli.parser.loader.load_spec`.

    Returns:
        A **new** dictionary with all references replaced by their targets.
        The input is not mutated.

    Raises:
        SpecReferenceError: Any of the reference errors raised by
            :meth:`RefResolver.resolve`.
    """
    return RefResolver(document).resolve(document)


def _is_reference(node: Any) -> bool:
    return isinstance(node, dict) and isinstance(node.get("$ref"), str)

"""Disk-based caching of remote OpenAPI documents.

This package provides :class:`SpecCache`, which stores fetched spec content
on disk using :mod:`diskcache`, keyed by a hash of the spec URL with a
configurable TTL.

The cache is consumed by :func:`~openapi_cli.parser.loader.load_spec` and
controlled by :class:`~openapi_cli.models.CacheSettings`.
"""

from openapi_cli.cache.cache import SpecCache

__all__ = ["SpecCache"]

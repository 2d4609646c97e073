"""Command generation -- turn a parsed OpenAPI spec into Typer commands.

Typical usage::

    from openapi_cli.generator import attach_commands, plan_commands

    descriptors = plan_commands(parser, configuration)
    attach_commands(app, configuration, parser, descriptors)

Sub-modules:

* :mod:`~openapi_cli.generator.naming` -- Command and option names derived
  from paths, operationIds and parameter names.
* :mod:`~openapi_cli.generator.path_matcher` -- Match literal request paths
  against the spec's path templates.
* :mod:`~openapi_cli.generator.planner` -- One immutable
  :class:`~openapi_cli.models.CommandDescriptor` per operation, collision
  handling, and the ``list`` rows.
* :mod:`~openapi_cli.generator.command_tree` -- Register the descriptors as
  Typer commands with dynamically generated signatures.
"""

from openapi_cli.generator.command_tree import attach_commands
from openapi_cli.generator.path_matcher import match_path
from openapi_cli.generator.planner import plan_commands, resolve_endpoint

__all__ = ["attach_commands", "match_path", "plan_commands", "resolve_endpoint"]

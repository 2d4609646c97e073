"""Response formatting: human-readable layout and ANSI highlighting.

* :mod:`~openapi_cli.formatting.human` -- :class:`HumanReadableFormatter`,
  the terminal-width-aware layout of decoded JSON.
* :mod:`~openapi_cli.formatting.highlight` -- :class:`OutputHighlighter`,
  ANSI colouring of JSON, YAML and formatter output.
"""

from openapi_cli.formatting.highlight import OutputHighlighter, strip_ansi
from openapi_cli.formatting.human import HumanReadableFormatter, Shape, classify, humanize_key

__all__ = [
    "HumanReadableFormatter",
    "OutputHighlighter",
    "Shape",
    "classify",
    "humanize_key",
    "strip_ansi",
]

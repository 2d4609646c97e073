"""Canonical Pydantic models shared across all openapi-cli modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Spec query results** -- produced by
:class:`~openapi_cli.parser.query.OpenApiParser`:
    :class:`HTTPMethod`, :class:`PathParameter`, :class:`QueryParameter`.

**Command surface** -- produced by the planner and consumed by the command
tree and the executor:
    :class:`CommandOption`, :class:`CommandDescriptor`, :class:`ListEntry`,
    :class:`PathMatch`, :class:`InvocationInput`.

**Configuration** -- the frozen per-registration configuration and the
file-based registration format:
    :class:`CacheSettings`, :class:`OutputSettings`,
    :class:`CommandConfiguration`, :class:`AuthSourceConfig`,
    :class:`RegistrationConfig`, :class:`RegistrationsFile`.

All models use Pydantic v2. Models that must not change after they are
built use ``frozen=True``.
"""

from __future__ import annotations

import enum
from typing import Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from openapi_cli.auth.base import AuthStrategy, NoAuth


# --- Spec query results ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods that produce commands, in their listing order."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"


class PathParameter(BaseModel):
    """A path parameter of one operation (``in: path``)."""

    name: str
    type: str = Field(default="string", description="schema.type, first element when a list")
    required: bool = True
    description: Optional[str] = None


class QueryParameter(BaseModel):
    """A query parameter of one operation (``in: query``)."""

    name: str
    required: bool = False
    description: Optional[str] = None


# --- Command surface ---


class CommandOption(BaseModel):
    """Maps an API parameter to its CLI option.

    ``param_name`` is the name sent on the wire (brackets and operators
    intact); ``option_name`` is the cleaned kebab-case flag without ``--``.
    """

    model_config = ConfigDict(frozen=True)

    param_name: str
    option_name: str
    required: bool = False
    description: Optional[str] = None


class CommandDescriptor(BaseModel):
    """Everything needed to expose and execute one operation as a command."""

    model_config = ConfigDict(frozen=True)

    name: str
    namespace: str = ""
    method: str = Field(description="Lowercase HTTP verb")
    path_template: str
    path_options: tuple[CommandOption, ...] = ()
    query_options: tuple[CommandOption, ...] = ()
    summary: Optional[str] = None
    description: Optional[str] = None
    operation_id: Optional[str] = None

    @property
    def qualified_name(self) -> str:
        """``"<namespace> <name>"`` when namespaced, else the bare name."""
        return f"{self.namespace} {self.name}" if self.namespace else self.name

    @property
    def help_text(self) -> str:
        """Summary, else description, else ``Execute METHOD /path``."""
        return (
            self.summary
            or self.description
            or f"Execute {self.method.upper()} {self.path_template}"
        )


class ListEntry(BaseModel):
    """One row of the ``list`` command output."""

    method: str
    path: str
    command: str
    description: str = ""


class PathMatch(BaseModel):
    """A spec path that matched a concrete request path."""

    path: str
    parameters: dict[str, str] = Field(default_factory=dict)
    methods: list[str] = Field(default_factory=list)
    is_exact: bool = False


class InvocationInput(BaseModel):
    """Option values collected from one command invocation."""

    path_values: dict[str, Optional[str]] = Field(
        default_factory=dict, description="Keyed by path parameter name"
    )
    query_values: dict[str, Any] = Field(
        default_factory=dict, description="Keyed by wire parameter name; None means omitted"
    )
    fields: list[str] = Field(default_factory=list, description="Raw --field values")
    raw_input: Optional[str] = Field(default=None, description="Raw --input JSON text")
    json_output: bool = False
    yaml_output: bool = False
    minify: bool = False
    include_headers: bool = False
    output_html: bool = False


# --- Configuration ---


DEFAULT_CACHE_TTL = 60
"""Seconds a fetched remote spec stays cached."""

DEFAULT_TIMEOUT = 30.0
"""Seconds before an outbound request times out."""


class CacheSettings(BaseModel):
    """Remote spec caching policy."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    ttl_seconds: int = DEFAULT_CACHE_TTL
    directory: Optional[str] = Field(
        default=None, description="Cache directory; the XDG cache dir when unset"
    )


class OutputSettings(BaseModel):
    """Output preferences that apply to every command of a registration."""

    model_config = ConfigDict(frozen=True)

    output_json: bool = False
    output_yaml: bool = False
    show_html_body: bool = False


class CommandConfiguration(BaseModel):
    """Frozen configuration of one spec registration.

    Built by :class:`~openapi_cli.registry.CommandConfigurationBuilder` and
    shared by reference across every command generated from the spec.
    Hooks are plain callables:

    * ``on_error(response, context)`` -- called once per HTTP error response;
      a truthy return suppresses the default error rendering.
    * ``banner`` -- a string, or a callable receiving the
      :class:`~openapi_cli.output.OutputManager`, shown before ``list``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    spec_source: str
    namespace: str = ""
    base_url: Optional[str] = None
    auth: AuthStrategy = Field(default_factory=NoAuth)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    follow_redirects: bool = False
    use_operation_ids: bool = False
    timeout: float = DEFAULT_TIMEOUT
    on_error: Optional[Callable[..., Any]] = None
    banner: Optional[Union[str, Callable[..., Any]]] = None


class AuthSourceConfig(BaseModel):
    """Credentials of a file-based registration.

    Secret values are credential sources understood by
    :func:`~openapi_cli.config.resolve_credential` (``env:VAR``,
    ``file:/path``, or a literal).
    """

    type: Literal["bearer", "api_key", "basic"]
    source: Optional[str] = Field(default=None, description="Token or API key source")
    header: Optional[str] = Field(default=None, description="Header name for api_key")
    username: Optional[str] = None
    password_source: Optional[str] = None


class RegistrationConfig(BaseModel):
    """One spec registration as written in ``openapi-cli.json`` / ``.yaml``."""

    spec: str = Field(description="URL or file path to the OpenAPI document")
    namespace: str = ""
    base_url: Optional[str] = None
    auth: Optional[AuthSourceConfig] = None
    use_operation_ids: bool = False
    follow_redirects: bool = False
    cache: CacheSettings = Field(default_factory=CacheSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    timeout: float = DEFAULT_TIMEOUT
    banner: Optional[str] = None


class RegistrationsFile(BaseModel):
    """Top-level shape of a registrations file."""

    registrations: list[RegistrationConfig] = Field(default_factory=list)

"""Spec registrations and their fluent configuration builder.

A registration ties one OpenAPI document to a namespace and the settings
its commands share::

    registry = CommandRegistry()
    (
        registry.register("https://api.example.com/openapi.yaml", "example")
        .base_url("https://api.example.com/v2")
        .bearer("s3cret")
        .cache_ttl(600)
    )
    app = create_app(registry)

:meth:`CommandRegistry.freeze` turns every builder into an immutable
:class:`~openapi_cli.models.CommandConfiguration`.  After that the
registry and its builders reject further changes, so the commands built
from a configuration always see the same settings.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Union

from openapi_cli.auth.strategies import select_auth_strategy
from openapi_cli.config import resolve_credential
from openapi_cli.exceptions import ConfigurationError
from openapi_cli.models import (
    DEFAULT_CACHE_TTL,
    DEFAULT_TIMEOUT,
    AuthSourceConfig,
    CacheSettings,
    CommandConfiguration,
    OutputSettings,
    RegistrationConfig,
    RegistrationsFile,
)

Banner = Union[str, Callable[..., Any]]


class CommandConfigurationBuilder:
    """Collects the settings of one registration.

    Every setter returns the builder, so calls chain.  Credentials of
    several kinds may be set; :meth:`build` keeps exactly one, in the
    order bearer > API key > basic > callable.

    Args:
        spec_source: File path or http(s) URL of the OpenAPI document.
        namespace: Command namespace; empty registers commands at the top
            level.
    """

    def __init__(self, spec_source: str, namespace: str = "") -> None:
        self._spec_source = spec_source
        self._namespace = namespace
        self._base_url: Optional[str] = None
        self._bearer: Optional[str] = None
        self._api_key: Optional[tuple[str, str]] = None
        self._basic: Optional[tuple[str, str]] = None
        self._token_factory: Optional[Callable[[], str]] = None
        self._on_error: Optional[Callable[..., Any]] = None
        self._banner: Optional[Banner] = None
        self._use_operation_ids = False
        self._follow_redirects = False
        self._cache_enabled = True
        self._cache_ttl = DEFAULT_CACHE_TTL
        self._cache_directory: Optional[str] = None
        self._output_json = False
        self._output_yaml = False
        self._show_html_body = False
        self._timeout = DEFAULT_TIMEOUT
        self._frozen = False

    @property
    def spec_source(self) -> str:
        return self._spec_source

    @property
    def namespace(self) -> str:
        return self._namespace

    def _check_mutable(self) -> None:
        if self._frozen:
            raise ConfigurationError(
                f"Registration '{self._namespace or self._spec_source}' can no "
                "longer be changed once the CLI has been built."
            )

    # ------------------------------------------------------------------ #
    # Fluent setters
    # ------------------------------------------------------------------ #

    def base_url(self, url: str) -> CommandConfigurationBuilder:
        """Send requests to *url* instead of the spec's first server."""
        self._check_mutable()
        self._base_url = url
        return self

    def bearer(self, token: str) -> CommandConfigurationBuilder:
        """Send ``Authorization: Bearer <token>``."""
        self._check_mutable()
        self._bearer = token
        return self

    def api_key(self, header: str, value: str) -> CommandConfigurationBuilder:
        """Send *value* in the *header* header."""
        self._check_mutable()
        self._api_key = (header, value)
        return self

    def basic(self, username: str, password: str) -> CommandConfigurationBuilder:
        """Send HTTP Basic credentials."""
        self._check_mutable()
        self._basic = (username, password)
        return self

    def auth(self, token_factory: Callable[[], str]) -> CommandConfigurationBuilder:
        """Ask *token_factory* for a bearer token on every request."""
        self._check_mutable()
        self._token_factory = token_factory
        return self

    def on_error(self, handler: Callable[..., Any]) -> CommandConfigurationBuilder:
        """Call ``handler(response, context)`` for HTTP error responses.

        A truthy return value suppresses the default error output.
        """
        self._check_mutable()
        self._on_error = handler
        return self

    def banner(self, banner: Banner) -> CommandConfigurationBuilder:
        """Show *banner* before the ``list`` output.

        Either a string, or a callable that receives the
        :class:`~openapi_cli.output.OutputManager`.
        """
        self._check_mutable()
        self._banner = banner
        return self

    def use_operation_ids(self, enabled: bool = True) -> CommandConfigurationBuilder:
        """Name commands after their ``operationId`` where one is declared."""
        self._check_mutable()
        self._use_operation_ids = enabled
        return self

    def follow_redirects(self, enabled: bool = True) -> CommandConfigurationBuilder:
        self._check_mutable()
        self._follow_redirects = enabled
        return self

    def cache_ttl(self, seconds: int) -> CommandConfigurationBuilder:
        """Keep a fetched remote spec for *seconds* seconds."""
        self._check_mutable()
        if seconds < 0:
            raise ConfigurationError("Cache TTL must not be negative.")
        self._cache_ttl = seconds
        return self

    def no_cache(self) -> CommandConfigurationBuilder:
        """Fetch a remote spec on every run."""
        self._check_mutable()
        self._cache_enabled = False
        return self

    def cache_directory(self, directory: str) -> CommandConfigurationBuilder:
        self._check_mutable()
        self._cache_directory = directory
        return self

    def output_json(self, enabled: bool = True) -> CommandConfigurationBuilder:
        """Print JSON responses as JSON by default."""
        self._check_mutable()
        self._output_json = enabled
        return self

    def output_yaml(self, enabled: bool = True) -> CommandConfigurationBuilder:
        """Print JSON responses as YAML by default."""
        self._check_mutable()
        self._output_yaml = enabled
        return self

    def show_html_body(self, enabled: bool = True) -> CommandConfigurationBuilder:
        """Print HTML response bodies without ``--output-html``."""
        self._check_mutable()
        self._show_html_body = enabled
        return self

    def timeout(self, seconds: float) -> CommandConfigurationBuilder:
        self._check_mutable()
        if seconds <= 0:
            raise ConfigurationError("Timeout must be positive.")
        self._timeout = seconds
        return self

    # ------------------------------------------------------------------ #
    # Build
    # ------------------------------------------------------------------ #

    def build(self) -> CommandConfiguration:
        """Return the immutable configuration of this registration."""
        return CommandConfiguration(
            spec_source=self._spec_source,
            namespace=self._namespace,
            base_url=self._base_url,
            auth=select_auth_strategy(
                bearer=self._bearer,
                api_key=self._api_key,
                basic=self._basic,
                token_factory=self._token_factory,
            ),
            cache=CacheSettings(
                enabled=self._cache_enabled,
                ttl_seconds=self._cache_ttl,
                directory=self._cache_directory,
            ),
            output=OutputSettings(
                output_json=self._output_json,
                output_yaml=self._output_yaml,
                show_html_body=self._show_html_body,
            ),
            follow_redirects=self._follow_redirects,
            use_operation_ids=self._use_operation_ids,
            timeout=self._timeout,
            on_error=self._on_error,
            banner=self._banner,
        )

    def freeze(self) -> CommandConfiguration:
        """Build the configuration and reject any later change."""
        self._frozen = True
        return self.build()


class CommandRegistry:
    """The set of registrations an app is built from.

    Namespaces are unique; at most one registration may go without a
    namespace.
    """

    def __init__(self) -> None:
        self._builders: list[CommandConfigurationBuilder] = []
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._builders)

    def register(self, spec_source: str, namespace: str = "") -> CommandConfigurationBuilder:
        """Add a registration and return its builder.

        Args:
            spec_source: File path or http(s) URL of the OpenAPI document.
            namespace: Command namespace; empty registers the commands at
                the top level.

        Raises:
            ConfigurationError: If the registry is frozen or the namespace
                is already taken.
        """
        if self._frozen:
            raise ConfigurationError(
                "Cannot register a spec after the CLI has been built."
            )
        for builder in self._builders:
            if builder.namespace == namespace:
                label = f"Namespace '{namespace}'" if namespace else "The top level"
                raise ConfigurationError(f"{label} is already registered.")
        builder = CommandConfigurationBuilder(spec_source, namespace)
        self._builders.append(builder)
        return builder

    def freeze(self) -> list[CommandConfiguration]:
        """Freeze every builder and return the configurations in registration order."""
        self._frozen = True
        return [builder.freeze() for builder in self._builders]

    def clear(self) -> None:
        """Drop every registration and unfreeze the registry."""
        self._builders = []
        self._frozen = False

    # ------------------------------------------------------------------ #
    # File-based registrations
    # ------------------------------------------------------------------ #

    def add_from_file(self, registrations: RegistrationsFile) -> None:
        """Register everything listed in a registrations file."""
        for registration in registrations.registrations:
            self.add_registration(registration)

    def add_registration(self, registration: RegistrationConfig) -> CommandConfigurationBuilder:
        """Register one file-based entry, resolving its credential sources.

        Raises:
            ConfigurationError: If a credential source cannot be resolved.
        """
        builder = self.register(registration.spec, registration.namespace)
        if registration.base_url:
            builder.base_url(registration.base_url)
        if registration.auth is not None:
            _apply_auth(builder, registration.auth)
        if registration.banner:
            builder.banner(registration.banner)
        builder.use_operation_ids(registration.use_operation_ids)
        builder.follow_redirects(registration.follow_redirects)
        builder.cache_ttl(registration.cache.ttl_seconds)
        if not registration.cache.enabled:
            builder.no_cache()
        if registration.cache.directory:
            builder.cache_directory(registration.cache.directory)
        builder.output_json(registration.output.output_json)
        builder.output_yaml(registration.output.output_yaml)
        builder.show_html_body(registration.output.show_html_body)
        builder.timeout(registration.timeout)
        return builder


def _apply_auth(builder: CommandConfigurationBuilder, auth: AuthSourceConfig) -> None:
    if auth.type == "bearer":
        builder.bearer(resolve_credential(_required(auth.source, "source", auth.type)))
    elif auth.type == "api_key":
        builder.api_key(
            _required(auth.header, "header", auth.type),
            resolve_credential(_required(auth.source, "source", auth.type)),
        )
    elif auth.type == "basic":
        builder.basic(
            _required(auth.username, "username", auth.type),
            resolve_credential(_required(auth.password_source, "password_source", auth.type)),
        )


def _required(value: Optional[str], key: str, auth_type: str) -> str:
    if not value:
        raise ConfigurationError(f"Auth type '{auth_type}' requires '{key}'.")
    return value

"""Tests for openapi_cli.registry: builders, freezing, and file-based registrations."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from openapi_cli.auth import ApiKeyAuth, BasicAuth, BearerAuth, CallableAuth, NoAuth
from openapi_cli.exceptions import ConfigurationError
from openapi_cli.models import (
    DEFAULT_CACHE_TTL,
    AuthSourceConfig,
    RegistrationConfig,
    RegistrationsFile,
)
from openapi_cli.registry import CommandRegistry


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class TestBuilder:
    def test_defaults(self) -> None:
        config = CommandRegistry().register("spec.yaml").build()

        assert config.spec_source == "spec.yaml"
        assert config.namespace == ""
        assert config.base_url is None
        assert isinstance(config.auth, NoAuth)
        assert config.cache.enabled is True
        assert config.cache.ttl_seconds == DEFAULT_CACHE_TTL
        assert config.follow_redirects is False
        assert config.use_operation_ids is False

    def test_fluent_chain(self) -> None:
        def hook(response, context):
            return True

        config = (
            CommandRegistry()
            .register("https://api.example.com/openapi.yaml", "example")
            .base_url("https://api.example.com/v2")
            .bearer("s3cret")
            .cache_ttl(600)
            .use_operation_ids()
            .follow_redirects()
            .output_yaml()
            .show_html_body()
            .timeout(5)
            .on_error(hook)
            .banner("Example API")
            .build()
        )

        assert config.namespace == "example"
        assert config.base_url == "https://api.example.com/v2"
        assert isinstance(config.auth, BearerAuth)
        assert config.cache.ttl_seconds == 600
        assert config.use_operation_ids is True
        assert config.follow_redirects is True
        assert config.output.output_yaml is True
        assert config.output.show_html_body is True
        assert config.timeout == 5
        assert config.on_error is hook
        assert config.banner == "Example API"

    @pytest.mark.parametrize(
        ("configure", "expected"),
        [
            (lambda b: b.auth(lambda: "t").basic("u", "p").api_key("K", "v").bearer("b"), BearerAuth),
            (lambda b: b.auth(lambda: "t").basic("u", "p").api_key("K", "v"), ApiKeyAuth),
            (lambda b: b.auth(lambda: "t").basic("u", "p"), BasicAuth),
            (lambda b: b.auth(lambda: "t"), CallableAuth),
        ],
    )
    def test_auth_priority(self, configure, expected) -> None:
        builder = CommandRegistry().register("spec.yaml")
        configure(builder)
        assert type(builder.build().auth) is expected

    def test_no_cache(self) -> None:
        config = CommandRegistry().register("spec.yaml").no_cache().cache_directory("/tmp/c").build()
        assert config.cache.enabled is False
        assert config.cache.directory == "/tmp/c"

    def test_negative_ttl_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Cache TTL must not be negative"):
            CommandRegistry().register("spec.yaml").cache_ttl(-1)

    def test_zero_timeout_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Timeout must be positive"):
            CommandRegistry().register("spec.yaml").timeout(0)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_duplicate_namespace(self) -> None:
        registry = CommandRegistry()
        registry.register("a.yaml", "shop")

        with pytest.raises(ConfigurationError, match="Namespace 'shop' is already registered"):
            registry.register("b.yaml", "shop")

    def test_single_top_level(self) -> None:
        registry = CommandRegistry()
        registry.register("a.yaml")

        with pytest.raises(ConfigurationError, match="The top level is already registered"):
            registry.register("b.yaml")

    def test_freeze_returns_configs_in_order(self) -> None:
        registry = CommandRegistry()
        registry.register("a.yaml", "a")
        registry.register("b.yaml", "b")

        configs = registry.freeze()

        assert [c.namespace for c in configs] == ["a", "b"]
        assert registry.frozen is True
        assert len(registry) == 2

    def test_register_after_freeze(self) -> None:
        registry = CommandRegistry()
        registry.freeze()

        with pytest.raises(ConfigurationError, match="Cannot register a spec after the CLI has been built"):
            registry.register("a.yaml")

    def test_builder_locked_after_freeze(self) -> None:
        registry = CommandRegistry()
        builder = registry.register("a.yaml", "shop")
        registry.freeze()

        with pytest.raises(ConfigurationError, match="'shop' can no longer be changed"):
            builder.bearer("late")

    def test_configuration_is_immutable(self) -> None:
        config = CommandRegistry().register("a.yaml").build()
        with pytest.raises(ValidationError):
            config.base_url = "https://changed.test"

    def test_clear(self) -> None:
        registry = CommandRegistry()
        registry.register("a.yaml")
        registry.freeze()

        registry.clear()

        assert len(registry) == 0
        registry.register("a.yaml")


# ---------------------------------------------------------------------------
# File-based registrations
# ---------------------------------------------------------------------------


class TestFileRegistrations:
    def test_settings_are_applied(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SHOP_TOKEN", "from-env")
        registry = CommandRegistry()
        registry.add_from_file(
            RegistrationsFile(
                registrations=[
                    RegistrationConfig(
                        spec="shop.yaml",
                        namespace="shop",
                        base_url="http://localhost:8080",
                        auth=AuthSourceConfig(type="bearer", source="env:SHOP_TOKEN"),
                        use_operation_ids=True,
                        banner="Shop",
                    ),
                    RegistrationConfig(spec="other.yaml", namespace="other"),
                ]
            )
        )

        shop, other = registry.freeze()

        assert shop.base_url == "http://localhost:8080"
        assert shop.auth.authenticate().headers == {"Authorization": "Bearer from-env"}
        assert shop.use_operation_ids is True
        assert shop.banner == "Shop"
        assert isinstance(other.auth, NoAuth)

    def test_api_key_and_basic(self) -> None:
        registry = CommandRegistry()
        api = registry.add_registration(
            RegistrationConfig(
                spec="a.yaml",
                namespace="a",
                auth=AuthSourceConfig(type="api_key", header="X-Key", source="literal"),
            )
        )
        basic = registry.add_registration(
            RegistrationConfig(
                spec="b.yaml",
                namespace="b",
                auth=AuthSourceConfig(type="basic", username="ada", password_source="pw"),
            )
        )

        assert api.build().auth.authenticate().headers == {"X-Key": "literal"}
        assert isinstance(basic.build().auth, BasicAuth)

    def test_missing_auth_field(self) -> None:
        registration = RegistrationConfig(
            spec="a.yaml", auth=AuthSourceConfig(type="api_key", source="k")
        )

        with pytest.raises(ConfigurationError, match="Auth type 'api_key' requires 'header'"):
            CommandRegistry().add_registration(registration)

    def test_unresolvable_credential(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NOPE", raising=False)
        registration = RegistrationConfig(
            spec="a.yaml", auth=AuthSourceConfig(type="bearer", source="env:NOPE")
        )

        with pytest.raises(ConfigurationError, match="Environment variable 'NOPE' is not set"):
            CommandRegistry().add_registration(registration)

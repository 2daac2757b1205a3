"""Tests for path management."""

from pathlib import Path

from brew_services.config.paths import (
    BOOT_PATH,
    ENV_VAR,
    PREFIX_ENV_VAR,
    get_config_path,
    get_registry_root,
    get_scope_path,
    get_services_home,
    get_user_path,
)


class TestGetServicesHome:
    """Tests for get_services_home()."""

    def test_default_is_home_dot_brew_services(self, monkeypatch):
        monkeypatch.delenv(ENV_VAR, raising=False)
        get_services_home.cache_clear()

        assert get_services_home() == Path.home() / ".brew-services"

    def test_respects_env_var(self, monkeypatch, tmp_path):
        custom_path = tmp_path / "custom"
        monkeypatch.setenv(ENV_VAR, str(custom_path))
        get_services_home.cache_clear()

        assert get_services_home() == custom_path.resolve()

    def test_expands_tilde_in_env_var(self, monkeypatch):
        monkeypatch.setenv(ENV_VAR, "~/my-services")
        get_services_home.cache_clear()

        assert get_services_home() == (Path.home() / "my-services").resolve()

    def test_config_path(self, monkeypatch, tmp_path):
        monkeypatch.setenv(ENV_VAR, str(tmp_path))
        get_services_home.cache_clear()

        assert get_config_path() == tmp_path.resolve() / "config.toml"


class TestRegistryRoot:
    """Tests for get_registry_root()."""

    def test_unset(self, monkeypatch):
        monkeypatch.delenv(PREFIX_ENV_VAR, raising=False)
        assert get_registry_root() is None

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv(PREFIX_ENV_VAR, str(tmp_path))
        assert get_registry_root() == tmp_path


class TestScopePaths:
    """Tests for launchd scope directories."""

    def test_user_path(self):
        assert get_user_path(Path("/Users/alice")) == Path(
            "/Users/alice/Library/LaunchAgents"
        )

    def test_privileged_uses_boot_path(self):
        assert get_scope_path(True, Path("/Users/alice")) == BOOT_PATH
        assert BOOT_PATH == Path("/Library/LaunchDaemons")

    def test_unprivileged_uses_user_path(self):
        home = Path("/Users/alice")
        assert get_scope_path(False, home) == get_user_path(home)

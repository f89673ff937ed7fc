"""Tests for configuration and credential storage."""

import os
import stat
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from proxmox_mobile.client.exceptions import ConfigurationError
from proxmox_mobile.client.models import Credentials
from proxmox_mobile.config import (
    Config,
    ConfigManager,
    CredentialStore,
    FileCredentialStore,
    MemoryCredentialStore,
    ProfileConfig,
)


def _mode(path) -> int:
    return stat.S_IMODE(os.stat(path).st_mode)


class TestProfileConfig:
    """Tests for profile validation."""

    def test_defaults(self):
        profile = ProfileConfig(host="pve.local", username="root")

        assert profile.port == 8006
        assert profile.realm == "pam"
        assert profile.use_https is True
        assert profile.verify_tls is True

    def test_scheme_is_stripped_from_host(self):
        profile = ProfileConfig(host="https://pve.local/", username="root")

        assert profile.host == "pve.local"

    def test_username_with_realm_rejected(self):
        with pytest.raises(ValidationError):
            ProfileConfig(host="pve.local", username="root@pam")

    def test_empty_host_rejected(self):
        with pytest.raises(ValidationError):
            ProfileConfig(host="https://", username="root")

    def test_to_target_and_credentials(self):
        profile = ProfileConfig(host="pve.local", username="alice", realm="pve", verify_tls=False, timeout=10)

        target = profile.to_target()
        credentials = profile.to_credentials("pw")

        assert target.host == "pve.local"
        assert target.verify_tls is False
        assert target.timeout == 10
        assert credentials == Credentials(username="alice", password="pw", realm="pve")


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_uses_env_directory(self, mock_config_dir):
        assert ConfigManager().config_file == mock_config_dir / "config.json"

    def test_load_missing_file(self, mock_config_dir):
        with pytest.raises(ConfigurationError, match="config init"):
            ConfigManager().load()

    def test_save_and_load(self, mock_config_manager, mock_config):
        loaded = mock_config_manager.load()

        assert loaded == mock_config
        assert _mode(mock_config_manager.config_file) == 0o600
        assert _mode(mock_config_manager.config_dir) == 0o700

    def test_fixes_unsafe_permissions(self, mock_config_manager):
        mock_config_manager.config_file.chmod(0o644)

        mock_config_manager.load()

        assert _mode(mock_config_manager.config_file) == 0o600

    def test_invalid_json(self, mock_config_manager):
        mock_config_manager.config_file.write_text("{not json")

        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            mock_config_manager.load()

    def test_first_profile_becomes_active(self, mock_config_dir):
        manager = ConfigManager()
        config = manager.add_profile(Config(active_profile="x"), "lab", ProfileConfig(host="lab", username="root"))

        assert config.active_profile == "lab"

    def test_add_profile_keeps_active_unless_asked(self, mock_config_manager):
        manager = mock_config_manager
        config = manager.load()

        config = manager.add_profile(config, "lab", ProfileConfig(host="lab", username="root"))
        assert config.active_profile == "default"

        config = manager.add_profile(config, "prod", ProfileConfig(host="prod", username="root"), set_active=True)
        assert config.active_profile == "prod"

    def test_remove_active_profile(self, mock_config_manager):
        manager = mock_config_manager
        config = manager.add_profile(manager.load(), "lab", ProfileConfig(host="lab", username="root"))

        config = manager.remove_profile(config, "default")

        assert "default" not in config.profiles
        assert config.active_profile == "lab"

    def test_remove_unknown_profile(self, mock_config_manager):
        with pytest.raises(ConfigurationError, match="not found"):
            mock_config_manager.remove_profile(mock_config_manager.load(), "nope")

    def test_get_profile_or_active(self, mock_config_manager, mock_profile_config):
        _, profile, name = mock_config_manager.get_profile_or_active()

        assert name == "default"
        assert profile == mock_profile_config

        with pytest.raises(ConfigurationError):
            mock_config_manager.get_profile_or_active("missing")


class TestCredentialStores:
    """Tests for credential stores."""

    def test_memory_store(self):
        store = MemoryCredentialStore()
        credentials = Credentials(username="root", password="secret")

        assert store.load() is None
        store.save(credentials)
        assert store.load() == credentials
        store.clear()
        assert store.load() is None

    def test_stores_satisfy_protocol(self, mock_config_dir):
        assert isinstance(MemoryCredentialStore(), CredentialStore)
        assert isinstance(FileCredentialStore("default"), CredentialStore)

    def test_file_store_roundtrip(self, mock_config_dir):
        store = FileCredentialStore("default")
        credentials = Credentials(username="root", password="secret", realm="pam")

        store.save(credentials)

        assert store.load() == credentials
        assert _mode(store.credentials_file) == 0o600
        assert FileCredentialStore("other").load() is None

    def test_temp_file_is_created_private(self, mock_config_dir):
        store = FileCredentialStore("default")

        with patch("proxmox_mobile.config.os.open", wraps=os.open) as os_open:
            store.save(Credentials(username="root", password="secret"))

        temp_opens = [c for c in os_open.call_args_list if str(c.args[0]).endswith(".tmp")]
        assert len(temp_opens) == 1
        assert temp_opens[0].args[2] == 0o600

    def test_leftover_temp_file_is_tightened(self, mock_config_dir):
        store = FileCredentialStore("default")
        temp_file = store.credentials_file.with_suffix(".tmp")
        temp_file.parent.mkdir(parents=True, exist_ok=True)
        temp_file.write_text("{}")
        temp_file.chmod(0o644)

        store.save(Credentials(username="root", password="secret"))

        assert _mode(store.credentials_file) == 0o600
        assert not temp_file.exists()

    def test_file_store_profiles_are_independent(self, mock_config_dir):
        FileCredentialStore("a").save(Credentials(username="alice", password="pa"))
        FileCredentialStore("b").save(Credentials(username="bob", password="pb"))

        FileCredentialStore("a").clear()

        assert FileCredentialStore("a").load() is None
        assert FileCredentialStore("b").load().username == "bob"

    def test_clear_removes_empty_file(self, mock_config_dir):
        store = FileCredentialStore("default")
        store.save(Credentials(username="root", password="secret"))

        store.clear()

        assert not store.credentials_file.exists()
        # Clearing again is a no-op
        store.clear()

    def test_incomplete_entry_is_ignored(self, mock_config_dir):
        store = FileCredentialStore("default")
        store.save(Credentials(username="root", password=None))

        assert store.load() is None

    def test_password_not_in_repr(self):
        assert "secret" not in repr(Credentials(username="root", password="secret"))

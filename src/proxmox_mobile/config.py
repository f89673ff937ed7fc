"""Configuration management for proxmox-mobile.

This module handles loading, saving, and managing server profiles, and
provides the credential stores used when a session is established.
Files are stored as JSON with owner-only permissions.
"""

import json
import os
import stat
from pathlib import Path
from typing import Dict, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field, field_validator
from rich.console import Console

from proxmox_mobile.client.exceptions import ConfigurationError
from proxmox_mobile.client.models import (
    DEFAULT_PORT,
    DEFAULT_REALM,
    DEFAULT_TIMEOUT,
    ConnectionTarget,
    Credentials,
)

console = Console(stderr=True)

CONFIG_DIR_ENV = "PROXMOX_MOBILE_CONFIG_DIR"


class ProfileConfig(BaseModel):
    """Configuration for a single Proxmox VE server.

    Attributes:
        host: Hostname or IP address of the server
        port: API port
        use_https: Whether to use https
        verify_tls: Whether to verify the TLS certificate and hostname
        username: Login name without realm
        realm: Authentication realm
        timeout: Request timeout in seconds
    """

    host: str = Field(..., min_length=1, description="Server hostname or IP")
    port: int = Field(DEFAULT_PORT, ge=1, le=65535, description="API port")
    use_https: bool = Field(True, description="Use https")
    verify_tls: bool = Field(True, description="Verify TLS certificates")
    username: str = Field(..., min_length=1, description="Login name")
    realm: str = Field(DEFAULT_REALM, min_length=1, description="Authentication realm")
    timeout: float = Field(DEFAULT_TIMEOUT, ge=1, le=300, description="Request timeout in seconds")

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Accept a bare host, stripping any scheme or trailing slash."""
        v = v.strip().rstrip("/")
        for prefix in ("https://", "http://"):
            if v.startswith(prefix):
                v = v[len(prefix):]
        if not v:
            raise ValueError("Host cannot be empty")
        return v

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Reject a realm suffix; the realm is a separate field."""
        if v.strip() != v:
            raise ValueError("Username cannot have leading/trailing whitespace")
        if "@" in v:
            raise ValueError("Give the username without '@realm'; use --realm instead")
        return v

    def to_target(self) -> ConnectionTarget:
        """Build the connection target for this profile."""
        return ConnectionTarget(
            host=self.host,
            port=self.port,
            use_https=self.use_https,
            verify_tls=self.verify_tls,
            timeout=self.timeout,
        )

    def to_credentials(self, password: Optional[str]) -> Credentials:
        """Build login credentials for this profile."""
        return Credentials(username=self.username, password=password, realm=self.realm)


class Config(BaseModel):
    """Main configuration container.

    Attributes:
        active_profile: Name of the currently active profile
        profiles: Dictionary mapping profile names to their configurations
    """

    active_profile: str = Field("default", description="Active profile name")
    profiles: Dict[str, ProfileConfig] = Field(
        default_factory=dict, description="Profile configurations"
    )

    def get_active_profile(self) -> ProfileConfig:
        """Get the active profile configuration.

        Raises:
            ConfigurationError: If active profile doesn't exist
        """
        return self.get_profile(self.active_profile)

    def get_profile(self, name: str) -> ProfileConfig:
        """Get a specific profile by name.

        Raises:
            ConfigurationError: If profile doesn't exist
        """
        if name not in self.profiles:
            raise ConfigurationError(
                f"Profile '{name}' not found. "
                f"Available profiles: {', '.join(self.profiles.keys()) or 'none'}"
            )
        return self.profiles[name]


def default_config_dir() -> Path:
    """Resolve the configuration directory ($PROXMOX_MOBILE_CONFIG_DIR or ~/.proxmox-mobile)."""
    env_dir = os.getenv(CONFIG_DIR_ENV)
    if env_dir:
        return Path(env_dir)
    return Path.home() / ".proxmox-mobile"


def _ensure_private_dir(path: Path) -> None:
    if not path.exists():
        path.mkdir(mode=0o700, parents=True)
    else:
        path.chmod(0o700)


def _write_private_file(path: Path, content: str) -> None:
    """Write a file with 600 permissions via temp file and atomic rename."""
    _ensure_private_dir(path.parent)
    temp_file = path.with_suffix(".tmp")
    fd = os.open(temp_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        # A leftover temp file keeps its old mode through O_CREAT
        os.fchmod(f.fileno(), 0o600)
        f.write(content)
    temp_file.replace(path)


class ConfigManager:
    """Manages configuration file operations.

    This class handles reading, writing, and securing the configuration file.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_dir: Custom configuration directory. If None, uses default
                       (~/.proxmox-mobile or $PROXMOX_MOBILE_CONFIG_DIR)
        """
        self.config_dir = config_dir or default_config_dir()
        self.config_file = self.config_dir / "config.json"

    def check_config_permissions(self) -> None:
        """Check and fix configuration file permissions.

        Configuration file should be 600 (rw-------).
        """
        if not self.config_file.exists():
            return

        current_mode = stat.S_IMODE(os.stat(self.config_file).st_mode)
        expected_mode = 0o600

        if current_mode != expected_mode:
            console.print(
                f"[yellow]Warning:[/yellow] Config file has unsafe permissions "
                f"({oct(current_mode)}). Setting to {oct(expected_mode)}..."
            )
            try:
                self.config_file.chmod(expected_mode)
            except OSError as e:
                console.print(
                    f"[red]Error:[/red] Could not fix permissions: {e}\n"
                    f"Please manually set permissions: chmod 600 {self.config_file}"
                )

    def exists(self) -> bool:
        return self.config_file.exists()

    def load(self) -> Config:
        """Load configuration from file.

        Raises:
            ConfigurationError: If configuration file is missing or invalid
        """
        if not self.config_file.exists():
            raise ConfigurationError(
                f"Configuration file not found: {self.config_file}\n"
                "Run 'proxmox-mobile config init' to create initial configuration"
            )

        self.check_config_permissions()

        try:
            with open(self.config_file, "r") as f:
                data = json.load(f)
            return Config.model_validate(data)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in configuration file: {e}") from e
        except ValueError as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def load_or_default(self) -> Config:
        """Load configuration, or return an empty one if there is no file yet."""
        if not self.exists():
            return Config()
        return self.load()

    def save(self, config: Config) -> None:
        """Save configuration to file.

        Raises:
            ConfigurationError: If configuration cannot be saved
        """
        try:
            _write_private_file(self.config_file, config.model_dump_json(indent=2))
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration: {e}") from e

    def add_profile(
        self,
        config: Config,
        name: str,
        profile: ProfileConfig,
        set_active: bool = False,
    ) -> Config:
        """Add or update a profile in configuration.

        The first profile added always becomes active.
        """
        first = not config.profiles
        config.profiles[name] = profile
        if set_active or first:
            config.active_profile = name
        return config

    def remove_profile(self, config: Config, name: str) -> Config:
        """Remove a profile.

        Raises:
            ConfigurationError: If the profile doesn't exist
        """
        config.get_profile(name)
        del config.profiles[name]
        if config.active_profile == name:
            config.active_profile = next(iter(config.profiles), "default")
        return config

    def get_profile_or_active(
        self,
        profile_name: Optional[str] = None,
    ) -> tuple[Config, ProfileConfig, str]:
        """Get a specific profile or the active profile.

        Returns:
            Tuple of (config, profile, profile_name)

        Raises:
            ConfigurationError: If profile doesn't exist or no configuration
        """
        config = self.load()
        name = profile_name or config.active_profile
        return config, config.get_profile(name), name


@runtime_checkable
class CredentialStore(Protocol):
    """Supplier of saved credentials, consulted only at login time."""

    def load(self) -> Optional[Credentials]:
        ...

    def save(self, credentials: Credentials) -> None:
        ...

    def clear(self) -> None:
        ...


class MemoryCredentialStore:
    """Credential store that keeps credentials in memory only."""

    def __init__(self, credentials: Optional[Credentials] = None):
        self._credentials = credentials

    def load(self) -> Optional[Credentials]:
        return self._credentials

    def save(self, credentials: Credentials) -> None:
        self._credentials = credentials

    def clear(self) -> None:
        self._credentials = None


class FileCredentialStore:
    """Credential store backed by a JSON file with 600 permissions.

    Entries are keyed by profile name. The file is protected by filesystem
    permissions only; nothing is written unless the user asks to save
    credentials.
    """

    def __init__(self, profile: str, config_dir: Optional[Path] = None):
        self.profile = profile
        self.config_dir = config_dir or default_config_dir()
        self.credentials_file = self.config_dir / "credentials.json"

    def _read_all(self) -> Dict[str, dict]:
        if not self.credentials_file.exists():
            return {}
        try:
            with open(self.credentials_file, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in credentials file: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid credentials file: {self.credentials_file}")
        return data

    def _write_all(self, data: Dict[str, dict]) -> None:
        try:
            _write_private_file(self.credentials_file, json.dumps(data, indent=2))
        except OSError as e:
            raise ConfigurationError(f"Failed to save credentials: {e}") from e

    def load(self) -> Optional[Credentials]:
        """Load saved credentials for the profile, if complete."""
        entry = self._read_all().get(self.profile)
        if not entry:
            return None
        try:
            credentials = Credentials.model_validate(entry)
        except ValueError:
            return None
        if not credentials.username or not credentials.password:
            return None
        return credentials

    def save(self, credentials: Credentials) -> None:
        data = self._read_all()
        data[self.profile] = credentials.model_dump()
        self._write_all(data)

    def clear(self) -> None:
        data = self._read_all()
        if data.pop(self.profile, None) is None:
            return
        if data:
            self._write_all(data)
        else:
            self.credentials_file.unlink()

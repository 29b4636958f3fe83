"""Configuration handling for cazdo"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import tomlkit

from cazdo.constants import DEFAULT_PROTECTED_BRANCHES, PAT_ENV_VAR
from cazdo.exceptions import ConfigError


def get_config_path() -> Path:
    """Location of ``config.toml``, honouring ``XDG_CONFIG_HOME``."""
    base = os.environ.get("XDG_CONFIG_HOME")
    config_home = Path(base) if base else Path.home() / ".config"
    return config_home / "cazdo" / "config.toml"


@dataclass
class Config:
    """Configuration for cazdo with validation."""

    # Azure DevOps
    organization_url: str
    pat: Optional[str] = None  # Used only when the environment variable is unset
    request_timeout: float = 30.0

    # Branch filtering
    protected_branches: List[str] = field(default_factory=lambda: list(DEFAULT_PROTECTED_BRANCHES))

    # Execution modes
    verbose: bool = False
    debug: bool = False
    workers: Optional[int] = None  # Fetch pool size (None = auto-detect)

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_organization_url()
        self._validate_protected_branches()
        self._validate_request_timeout()

    def _validate_organization_url(self):
        """Validate organization_url is an http(s) URL and strip trailing slashes."""
        url = (self.organization_url or "").strip()
        if not url:
            raise ConfigError("organization_url cannot be empty")
        if not url.startswith(("https://", "http://")):
            raise ConfigError(f"organization_url must start with https:// or http://, got '{url}'")
        self.organization_url = url.rstrip("/")

    def _validate_protected_branches(self):
        """Validate protected_branches is a list of strings."""
        if not isinstance(self.protected_branches, list):
            raise ConfigError("protected_branches must be a list")
        for pattern in self.protected_branches:
            if not isinstance(pattern, str):
                raise ConfigError(f"protected branch patterns must be strings, got {pattern!r}")

    def _validate_request_timeout(self):
        """Validate request_timeout is positive."""
        if self.request_timeout <= 0:
            raise ConfigError(f"request_timeout must be positive, got {self.request_timeout}")

    def resolve_pat(self, environ: Optional[Mapping[str, str]] = None) -> str:
        """Resolve the personal access token.

        The environment variable wins over the ``pat`` entry of the config file.

        Raises:
            ConfigError: if neither source provides a token
        """
        env = os.environ if environ is None else environ
        token = (env.get(PAT_ENV_VAR) or "").strip() or (self.pat or "").strip()
        if not token:
            raise ConfigError(
                f"{PAT_ENV_VAR} environment variable not set.\n\n"
                "Set your Azure DevOps Personal Access Token:\n"
                f"  export {PAT_ENV_VAR}=\"your-personal-access-token\"\n\n"
                "The PAT needs 'Work Items (Read)' permission."
            )
        return token

    def pat_source(self, environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
        """Describe where the PAT comes from, without revealing it."""
        env = os.environ if environ is None else environ
        if (env.get(PAT_ENV_VAR) or "").strip():
            return f"environment ({PAT_ENV_VAR})"
        if (self.pat or "").strip():
            return "config file"
        return None

    def to_dict(self) -> dict:
        """Convert config to a dictionary (PAT masked)."""
        return {
            "organization_url": self.organization_url,
            "pat": "****" if self.pat else None,
            "request_timeout": self.request_timeout,
            "protected_branches": self.protected_branches,
            "verbose": self.verbose,
            "debug": self.debug,
            "workers": self.workers,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "Config":
        """Create Config from a flat dictionary."""
        known_fields = {
            "organization_url",
            "pat",
            "request_timeout",
            "protected_branches",
            "verbose",
            "debug",
            "workers",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        if "organization_url" not in filtered:
            raise ConfigError("organization_url is required")
        return cls(**filtered)

    @classmethod
    def from_toml(cls, data: Dict[str, Any]) -> "Config":
        """Create Config from parsed ``config.toml`` contents."""
        azure = data.get("azure_devops", {})
        branches = data.get("branches", {})
        flat: Dict[str, Any] = {
            "organization_url": azure.get("organization_url", ""),
        }
        if "pat" in azure:
            flat["pat"] = azure["pat"]
        if "request_timeout" in azure:
            flat["request_timeout"] = azure["request_timeout"]
        if "protected" in branches:
            flat["protected_branches"] = branches["protected"]
        return cls.from_dict(flat)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Config":
        """Load configuration from disk.

        Raises:
            ConfigError: if the file is missing, unreadable or invalid
        """
        config_path = path or get_config_path()
        if not config_path.exists():
            raise ConfigError(
                f"Configuration file not found at {config_path}\n\n"
                "Run 'cazdo config init' to set up your configuration."
            )
        try:
            data = tomllib.loads(config_path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigError(f"Failed to read config file {config_path}: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Failed to parse config file {config_path}: {e}") from e
        return cls.from_toml(data)

    def save(self, path: Optional[Path] = None) -> Path:
        """Write the configuration as TOML, preserving an existing file's comments.

        Returns:
            Path that was written
        """
        config_path = path or get_config_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        if config_path.exists():
            doc = tomlkit.parse(config_path.read_text(encoding="utf-8"))
        else:
            doc = tomlkit.document()
            doc.add(tomlkit.comment("cazdo configuration"))

        if "azure_devops" not in doc:
            doc["azure_devops"] = tomlkit.table()
        doc["azure_devops"]["organization_url"] = self.organization_url

        if "branches" not in doc:
            doc["branches"] = tomlkit.table()
        doc["branches"]["protected"] = list(self.protected_branches)

        config_path.write_text(tomlkit.dumps(doc), encoding="utf-8")
        return config_path

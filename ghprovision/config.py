"""Configuration management for the GitHub repository provisioner."""

import os
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, List, Mapping, Any

from dotenv import load_dotenv

from .errors import ConfigurationError
from .platform import get_default_identity_file, normalize_path

load_dotenv()  # Load .env file if it exists


DEFAULT_API_BASE = "https://api.github.com"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


def parse_bool(value: Any, option: str) -> bool:
    """Interpret a host-style option value ("1", "0", "yes", True...) as a bool."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean value for '{option}': {value!r}")


@dataclass(frozen=True)
class Config:
    """Options for repository creation, populated once and never mutated."""

    # Repository
    repo: Optional[str] = None  # Name or template, defaults to the project name
    public: bool = True
    has_issues: bool = True
    has_wiki: bool = True
    has_downloads: bool = True

    # Interaction
    prompt: bool = False

    # Local git wiring
    remote: str = "origin"

    # Hosting service
    api_base: str = DEFAULT_API_BASE
    timeout: float = 30.0
    identity_file: Optional[Path] = None

    # Logging
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.remote or not self.remote.strip():
            raise ConfigurationError("remote must be a non-empty git remote name")

        if any(c.isspace() for c in self.remote):
            raise ConfigurationError(f"Invalid remote name: {self.remote!r}")

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level.upper() not in valid_log_levels:
            raise ConfigurationError(
                f"Invalid log level: {self.log_level}. Must be one of {valid_log_levels}"
            )

        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")

        if not self.api_base.startswith(("http://", "https://")):
            raise ConfigurationError(f"api_base must be an http(s) URL: {self.api_base}")

    @property
    def repos_endpoint(self) -> str:
        """Repository-creation endpoint of the hosting API."""
        return self.api_base.rstrip("/") + "/user/repos"

    @property
    def identity_path(self) -> Path:
        """Identity file holding login/password, ~/.github unless overridden."""
        if self.identity_file is None:
            return get_default_identity_file()
        return normalize_path(self.identity_file)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "Config":
        """
        Build a Config from a host-supplied option mapping.

        Values may be strings as found in a profile section
        (``public = 0``, ``repo = {{ dist.name | lower }}``). Unknown keys
        are rejected so that typos do not silently fall back to defaults.

        Args:
            options: Mapping of option name to raw value

        Returns:
            Validated Config instance

        Raises:
            ConfigurationError: If an option is unknown or has an invalid value
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ConfigurationError(f"Unknown option(s): {', '.join(unknown)}")

        kwargs = {}
        for name, value in options.items():
            if name in ("public", "prompt", "has_issues", "has_wiki", "has_downloads"):
                kwargs[name] = parse_bool(value, name)
            elif name == "timeout":
                try:
                    kwargs[name] = float(value)
                except (TypeError, ValueError):
                    raise ConfigurationError(f"Invalid timeout: {value!r}")
            elif name == "identity_file":
                kwargs[name] = Path(value) if value else None
            elif name == "log_level":
                kwargs[name] = str(value).upper()
            elif name == "repo":
                kwargs[name] = str(value) if value else None
            else:
                kwargs[name] = str(value)

        return cls(**kwargs)


def load_configuration() -> Config:
    """Load configuration from GHPROVISION_* environment variables."""
    options = {}
    env_map = {
        "GHPROVISION_REPO": "repo",
        "GHPROVISION_PUBLIC": "public",
        "GHPROVISION_PROMPT": "prompt",
        "GHPROVISION_REMOTE": "remote",
        "GHPROVISION_HAS_ISSUES": "has_issues",
        "GHPROVISION_HAS_WIKI": "has_wiki",
        "GHPROVISION_HAS_DOWNLOADS": "has_downloads",
        "GHPROVISION_API_BASE": "api_base",
        "GHPROVISION_TIMEOUT": "timeout",
        "GHPROVISION_IDENTITY_FILE": "identity_file",
        "GHPROVISION_LOG_LEVEL": "log_level",
    }
    for env_name, option in env_map.items():
        value = os.getenv(env_name)
        if value is not None:
            options[option] = value

    if options.get("prompt") and parse_bool(options["prompt"], "prompt"):
        logging.getLogger('ghprovision.config').info(
            "GHPROVISION_PROMPT is set; confirmation requires an interactive terminal"
        )

    return Config.from_options(options)


def validate_configuration(config: Config) -> List[str]:
    """Validate configuration and return any errors or warnings."""
    from .naming import check_template

    errors = []

    if config.repo:
        template_error = check_template(config.repo)
        if template_error:
            errors.append(f"ERROR: Invalid repo template {config.repo!r}: {template_error}")

    if config.api_base.startswith("http://"):
        errors.append(f"WARNING: api_base is not using HTTPS: {config.api_base}")

    identity = config.identity_path
    if config.identity_file is not None and not identity.exists():
        errors.append(f"WARNING: Identity file does not exist: {identity}")

    if config.timeout > 300:
        errors.append("WARNING: High timeout may stall scaffolding on network issues")

    return errors

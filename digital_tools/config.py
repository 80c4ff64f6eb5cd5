"""
Configuration management for Digital Tools.

Handles:
- Parameter validation strictness
- Confirmation token lifetime
- Default caller class
- Built-in tool pack registration
- HTTP settings for the web pack

Stored at ~/.digital-tools/config.yaml. Environment variables override
the file.
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

# Default paths
DEFAULT_DATA_DIR = Path.home() / ".digital-tools"

ENV_STRICT = "DIGITAL_TOOLS_STRICT"
ENV_CONFIRMATION_TTL = "DIGITAL_TOOLS_CONFIRMATION_TTL"
ENV_LOG_LEVEL = "DIGITAL_TOOLS_LOG_LEVEL"
ENV_DEFAULT_CALLER = "DIGITAL_TOOLS_DEFAULT_CALLER"

_TRUTHY = {"1", "true", "yes", "on"}

# Accepted default callers and their canonical names
_CALLERS = {"human": "human", "ai": "ai", "agent": "ai"}


def _parse_caller(value: Any) -> str:
    normalized = str(value).strip().lower()
    if normalized not in _CALLERS:
        raise ValueError(f"default_caller must be 'human' or 'ai', got {value!r}")
    return _CALLERS[normalized]


@dataclass
class Config:
    """
    Main Digital Tools configuration.
    """
    # Validation
    strict_params: bool = False  # Reject undeclared arguments for every tool

    # Gate
    confirmation_ttl_seconds: int = 300
    default_caller: str = "human"  # human, ai

    # Startup
    register_builtin: bool = True

    # Web pack
    http_timeout_seconds: float = 30.0
    user_agent: str = "digital-tools/1.0"

    # Logging
    log_level: str = "INFO"

    # Paths
    data_dir: Path = field(default_factory=lambda: DEFAULT_DATA_DIR)

    def __post_init__(self):
        self.default_caller = _parse_caller(self.default_caller)

    @property
    def config_path(self) -> Path:
        return self.data_dir / "config.yaml"

    def ensure_data_dir(self) -> None:
        """Create data directory if it doesn't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strict_params": self.strict_params,
            "confirmation_ttl_seconds": self.confirmation_ttl_seconds,
            "default_caller": self.default_caller,
            "register_builtin": self.register_builtin,
            "http_timeout_seconds": self.http_timeout_seconds,
            "user_agent": self.user_agent,
            "log_level": self.log_level,
        }

    def save(self) -> None:
        """Save configuration to disk."""
        self.ensure_data_dir()

        with open(self.config_path, "w") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

        logger.debug(f"Configuration saved to {self.config_path}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any], data_dir: Optional[Path] = None) -> "Config":
        # Filter to only known fields to handle config evolution
        known_fields = {f.name for f in fields(cls)} - {"data_dir"}
        filtered = {k: v for k, v in data.items() if k in known_fields}
        unknown = set(data) - known_fields
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")
        return cls(data_dir=data_dir or DEFAULT_DATA_DIR, **filtered)

    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> "Config":
        """Load configuration from disk, then apply environment overrides."""
        data_dir = data_dir or DEFAULT_DATA_DIR
        config_path = data_dir / "config.yaml"

        data: Dict[str, Any] = {}
        if config_path.exists():
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError(f"Config file {config_path} must contain a mapping")

        config = cls.from_dict(data, data_dir=data_dir)
        config.apply_env(os.environ)
        return config

    def apply_env(self, env: Dict[str, str]) -> None:
        """Apply environment variable overrides."""
        if ENV_STRICT in env:
            self.strict_params = env[ENV_STRICT].strip().lower() in _TRUTHY
        if ENV_CONFIRMATION_TTL in env:
            self.confirmation_ttl_seconds = int(env[ENV_CONFIRMATION_TTL])
        if ENV_LOG_LEVEL in env:
            self.log_level = env[ENV_LOG_LEVEL].strip().upper()
        if ENV_DEFAULT_CALLER in env:
            self.default_caller = _parse_caller(env[ENV_DEFAULT_CALLER])

    @classmethod
    def exists(cls, data_dir: Optional[Path] = None) -> bool:
        """Check if configuration exists."""
        data_dir = data_dir or DEFAULT_DATA_DIR
        return (data_dir / "config.yaml").exists()


# Global config instance
_config: Optional[Config] = None


def get_config(data_dir: Optional[Path] = None) -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.load(data_dir)
    return _config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None

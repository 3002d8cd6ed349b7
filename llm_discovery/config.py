"""
Unified Configuration System for llm_discovery.

Supports YAML config files with environment variable overrides.

Usage:
    >>> from llm_discovery.config import get_config
    >>> config = get_config()
    >>> config.discovery.timeout  # doctest: +SKIP
    5.0
    >>> config.discovery.endpoint  # doctest: +SKIP
    'http://localhost:1234'
"""

import json
import logging
import os
import threading
from copy import deepcopy
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

try:
    import yaml

    YAML_AVAILABLE = True
except ImportError:
    YAML_AVAILABLE = False

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    pass


# =============================================================================
# Configuration Sections
# =============================================================================


@dataclass
class DiscoveryConfig:
    """Local server discovery configuration."""

    endpoint: str | None = None  # Base address of the local server, None disables discovery
    models_paths: list[str] = field(
        default_factory=lambda: ["api/v0/models", "v1/models"]  # Richer schema first
    )
    slots_path: str = "/slots"
    timeout: float = 5.0  # Per-request timeout in seconds
    provider: str = "local"
    fallback_context: int = 4096
    refresh_interval: float = 0.0  # Seconds between passes, 0 runs once

    def __post_init__(self) -> None:
        if self.endpoint is not None:
            self.endpoint = self.endpoint.strip() or None
        if not self.models_paths:
            raise ConfigValidationError("discovery.models_paths must not be empty")
        if self.timeout <= 0:
            raise ConfigValidationError("discovery.timeout must be > 0")
        if self.fallback_context < 1:
            raise ConfigValidationError("discovery.fallback_context must be >= 1")
        if self.refresh_interval < 0:
            raise ConfigValidationError("discovery.refresh_interval must be >= 0")
        if not self.provider:
            raise ConfigValidationError("discovery.provider must not be empty")

    @property
    def enabled(self) -> bool:
        return self.endpoint is not None


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None

    def __post_init__(self) -> None:
        self.level = self.level.upper()


@dataclass
class ServerConfig:
    """Catalog server configuration."""

    host: str = "127.0.0.1"  # Bind address (use 0.0.0.0 for remote)
    port: int = 8100  # HTTP port
    api_key: str | None = None  # Optional API key for admin endpoints
    enable_docs: bool = True  # Enable /docs endpoint

    def __post_init__(self) -> None:
        if self.port < 1 or self.port > 65535:
            raise ConfigValidationError("server.port must be between 1 and 65535")


# =============================================================================
# Main Configuration
# =============================================================================


@dataclass
class Config:
    """Complete llm_discovery configuration."""

    version: str = "1.0.0"
    profile: str = "default"

    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "version": self.version,
            "profile": self.profile,
            "discovery": asdict(self.discovery),
            "server": asdict(self.server),
            "logging": asdict(self.logging),
        }

    def save(self, path: str | Path) -> None:
        """Save configuration to file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if path.suffix in (".yaml", ".yml"):
            if not YAML_AVAILABLE:
                raise ImportError("PyYAML required for YAML export")
            with open(path, "w", encoding="utf-8") as f:
                yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
        elif path.suffix == ".json":
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2, default=str)
        else:
            raise ValueError(f"Unsupported format: {path.suffix}")

        logger.info(f"Configuration saved to {path}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create Config from dictionary."""
        try:
            return cls(
                version=data.get("version", "1.0.0"),
                profile=data.get("profile", "default"),
                discovery=DiscoveryConfig(**(data.get("discovery") or {})),
                server=ServerConfig(**(data.get("server") or {})),
                logging=LoggingConfig(**(data.get("logging") or {})),
            )
        except TypeError as e:
            raise ConfigValidationError(f"Invalid configuration: {e}") from e

    @classmethod
    def from_file(cls, path: str | Path) -> "Config":
        """Load Config from file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, encoding="utf-8") as f:
            if path.suffix in (".yaml", ".yml"):
                if not YAML_AVAILABLE:
                    raise ImportError("PyYAML required")
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)

        return cls.from_dict(data)


# =============================================================================
# Configuration Loader
# =============================================================================

_config_cache: Config | None = None
_config_lock = threading.Lock()


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries. Lists in ``override`` replace lists in ``base``."""
    result = deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = deepcopy(value)
    return result


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides."""
    mappings = {
        "LOCAL_ENDPOINT": ("discovery", "endpoint"),
        "LLM_DISCOVERY_TIMEOUT": ("discovery", "timeout"),
        "LLM_DISCOVERY_REFRESH": ("discovery", "refresh_interval"),
        "LLM_DISCOVERY_HOST": ("server", "host"),
        "LLM_DISCOVERY_PORT": ("server", "port"),
        "LLM_DISCOVERY_API_KEY": ("server", "api_key"),
        "LLM_LOG_LEVEL": ("logging", "level"),
    }

    for env_name, (section, key) in mappings.items():
        env_value = os.getenv(env_name)
        if env_value is None:
            continue

        if section not in data:
            data[section] = {}

        # Type coercion
        coerced_value: str | int | float
        if key == "port":
            try:
                coerced_value = int(env_value)
            except ValueError:
                continue
        elif key in ["timeout", "refresh_interval"]:
            try:
                coerced_value = float(env_value)
            except ValueError:
                continue
        else:
            coerced_value = env_value

        data[section][key] = coerced_value
        logger.debug(f"Applied env override: {env_name}")

    return data


def _get_config_paths(profile: str | None = None) -> list[Path]:
    """Get config file search paths, lowest precedence first."""
    paths = [
        Path("/etc/llm_discovery/llm_discovery.yaml"),  # System-wide
        Path.home() / ".config" / "llm_discovery" / "llm_discovery.yaml",  # User config
        Path("llm_discovery.yaml"),  # Project root
    ]

    if profile and profile != "default":
        paths.extend(
            [
                Path.home() / ".config" / "llm_discovery" / f"config.{profile}.yaml",
                Path(f"llm_discovery.{profile}.yaml"),
            ]
        )

    return [p for p in paths if p.exists()]


def load_config(
    path: str | Path | None = None, profile: str | None = None, use_env: bool = True
) -> Config:
    """Load configuration from file(s)."""
    data: dict[str, Any] = {}

    if path:
        config_path = Path(path)
        if config_path.exists():
            config = Config.from_file(config_path)
            data = config.to_dict()
        else:
            logger.warning(f"Config file not found: {config_path}, using defaults")
    else:
        for config_path in _get_config_paths(profile):
            try:
                config = Config.from_file(config_path)
                data = _deep_merge(data, config.to_dict())
            except (OSError, ValueError, ConfigValidationError) as e:
                logger.warning(f"Failed to load {config_path}: {e}")

    if use_env:
        data = _apply_env_overrides(data)

    if profile:
        data["profile"] = profile

    return Config.from_dict(data)


def get_config(
    path: str | Path | None = None,
    profile: str | None = None,
    use_env: bool = True,
    reload: bool = False,
) -> Config:
    """Get or load configuration with caching."""
    global _config_cache

    with _config_lock:
        if not reload and _config_cache is not None:
            return _config_cache

        _config_cache = load_config(path, profile, use_env)
        return _config_cache


def reload_config(**kwargs: Any) -> Config:
    """Reload configuration from disk."""
    return get_config(reload=True, **kwargs)


def clear_config_cache() -> None:
    """Clear configuration cache."""
    global _config_cache
    with _config_lock:
        _config_cache = None


def create_default_config(path: str | Path) -> Path:
    """Create a default configuration file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    config = Config()
    config.save(path)

    logger.info(f"Created configuration: {path}")
    return path


def setup_logging(config: LoggingConfig) -> None:
    """
    Configure root logging from a LoggingConfig.

    Discovery diagnostics are logged at DEBUG; set ``file`` to keep them out
    of the console.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, config.level, logging.INFO),
        format=config.format,
        handlers=handlers,
        force=True,
    )


__all__ = [
    "Config",
    "ConfigValidationError",
    "DiscoveryConfig",
    "LoggingConfig",
    "ServerConfig",
    "clear_config_cache",
    "create_default_config",
    "get_config",
    "load_config",
    "reload_config",
    "setup_logging",
]

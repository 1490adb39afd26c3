"""
Config system - layered factory settings.

Merge order (later overrides earlier):
1. Dataclass defaults
2. YAML file (explicit path, or ``factoria.yaml`` in the working directory)
3. Environment variables (``FACTORIA_*`` prefix)
4. Manual overrides
"""

from typing import Any, Dict, List, Optional, Set
from dataclasses import dataclass, field, fields
from pathlib import Path
import json
import logging
import os

from .errors import ConfigError
from .generators import ExhaustionPolicy

logger = logging.getLogger("factoria.config")

DEFAULT_CONFIG_FILE = "factoria.yaml"
DEFAULT_ENV_PREFIX = "FACTORIA_"


@dataclass
class FactoryConfig:
    """Typed settings for registries, generators and the pytest plugin."""

    max_depth: int = 32
    default_policy: ExhaustionPolicy = ExhaustionPolicy.CYCLE
    modules: List[str] = field(default_factory=list)
    debug: bool = False

    def __post_init__(self):
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
            raise ConfigError(f"max_depth must be an integer, got {self.max_depth!r}")
        if self.max_depth < 1:
            raise ConfigError(f"max_depth must be >= 1, got {self.max_depth}")

        try:
            self.default_policy = ExhaustionPolicy(self.default_policy)
        except ValueError:
            choices = ", ".join(p.value for p in ExhaustionPolicy)
            raise ConfigError(
                f"default_policy must be one of: {choices}; got {self.default_policy!r}"
            ) from None

        if isinstance(self.modules, str):
            self.modules = [m.strip() for m in self.modules.split(",") if m.strip()]
        if not isinstance(self.modules, list):
            raise ConfigError(f"modules must be a list of names, got {self.modules!r}")

        if not isinstance(self.debug, bool):
            raise ConfigError(f"debug must be a boolean, got {self.debug!r}")

    @classmethod
    def load(
        cls,
        path: Optional[str] = None,
        env_prefix: str = DEFAULT_ENV_PREFIX,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "FactoryConfig":
        """
        Load configuration from file, environment and overrides.

        Args:
            path: YAML file; when omitted ``factoria.yaml`` is used if present
            env_prefix: Prefix for environment variables
            overrides: Manual overrides (highest precedence)

        Raises:
            ConfigError: Missing explicit file, unknown keys or bad values
        """
        data: Dict[str, Any] = {}

        if path is not None:
            if not Path(path).exists():
                raise ConfigError(f"Config file not found: {path}")
            data.update(_load_yaml_file(Path(path)))
        elif Path(DEFAULT_CONFIG_FILE).exists():
            data.update(_load_yaml_file(Path(DEFAULT_CONFIG_FILE)))

        data.update(_load_from_env(env_prefix, {f.name for f in fields(cls)}))

        if overrides:
            data.update(overrides)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FactoryConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config key(s): {', '.join(unknown)}")
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_depth": self.max_depth,
            "default_policy": self.default_policy.value,
            "modules": list(self.modules),
            "debug": self.debug,
        }


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load config from YAML file; accepts a top-level ``factoria`` section."""
    import yaml
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")
    if "factoria" in data and isinstance(data["factoria"], dict):
        data = data["factoria"]
    return data


def _load_from_env(prefix: str, known: Set[str]) -> Dict[str, Any]:
    """
    Convert FACTORIA_MAX_DEPTH=10 to {"max_depth": 10}.

    Prefixed variables that do not name a setting (FACTORIA_HOME) are skipped.
    """
    data = {}
    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue
        name = key[len(prefix):].lower()
        if name not in known:
            logger.debug("Ignoring environment variable %s: not a config key", key)
            continue
        data[name] = _parse_value(value)
    return data


def _parse_value(value: str) -> Any:
    """Parse string value to appropriate type."""
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    if value.startswith(("{", "[")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value


# Active config used by module-level helpers
_active_config: Optional[FactoryConfig] = None


def get_config() -> FactoryConfig:
    """Return the active config, loading it on first use."""
    global _active_config
    if _active_config is None:
        _active_config = FactoryConfig.load()
    return _active_config


def set_config(config: Optional[FactoryConfig]) -> None:
    """Replace the active config; ``None`` forces a reload on next use."""
    global _active_config
    _active_config = config

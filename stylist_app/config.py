"""Configuration for the outfit recommendation engine."""

from dataclasses import dataclass, fields
from pathlib import Path
import os
from typing import Dict, Optional

DEFAULT_MAX_OUTFITS = 50
DEFAULT_FORECAST_MAX_OUTFITS = 10
DEFAULT_RANDOM_SEED = 42

_INT_FIELDS = (
    "max_outfits",
    "forecast_max_outfits",
    "suggestion_limit",
    "forecast_days",
    "forecast_top_n",
    "random_seed",
)


@dataclass
class EngineConfig:
    """Configuration values for the recommendation engine.

    The engine itself performs no I/O; these values bound the combinatorial
    work of outfit generation, pick the preference store backend and, when an
    OpenWeather key is present, let the host fetch live weather.
    """

    max_outfits: int = DEFAULT_MAX_OUTFITS
    forecast_max_outfits: int = DEFAULT_FORECAST_MAX_OUTFITS
    suggestion_limit: int = 10
    forecast_days: int = 5
    forecast_top_n: int = 5
    random_seed: int = DEFAULT_RANDOM_SEED
    log_level: str = "INFO"
    preference_store_path: Optional[str] = None
    openweather_api_key: Optional[str] = None
    default_location: Optional[str] = None
    environment: str | None = None

    def __post_init__(self) -> None:
        for name in _INT_FIELDS:
            if name != "random_seed" and getattr(self, name) < 0:
                raise ValueError(f"Config value '{name}' must not be negative")
        if not 1 <= self.forecast_days <= 5:
            raise ValueError("Config value 'forecast_days' must be between 1 and 5")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build a config from an environment YAML file overlaid with variables.

        ``APP_CONFIG_PATH`` names a file directly; otherwise ``APP_ENV`` selects
        ``<ENGINE_CONFIG_DIR>/<env>.yaml``. Upper-cased environment variables
        override keys from the file.
        """

        env_name = os.getenv("APP_ENV")
        path = cls._config_path(env_name)
        file_values = cls._load_yaml_config(path) if path and path.exists() else {}

        def lookup(key: str) -> Optional[str]:
            raw = os.getenv(key.upper(), file_values.get(key))
            if raw is None or str(raw).strip() == "":
                return None
            return str(raw).strip()

        values: Dict[str, object] = {}
        for name in _INT_FIELDS:
            raw = lookup(name)
            if raw is None:
                continue
            try:
                values[name] = int(raw)
            except ValueError as exc:
                raise ValueError(f"Config value '{name}' must be an integer, got '{raw}'") from exc

        known = {field.name for field in fields(cls)} - set(_INT_FIELDS) - {"environment"}
        for name in sorted(known):
            raw = lookup(name)
            if raw is not None:
                values[name] = raw

        return cls(environment=env_name, **values)

    @staticmethod
    def _config_path(env_name: Optional[str]) -> Optional[Path]:
        explicit = os.getenv("APP_CONFIG_PATH")
        if explicit:
            return Path(explicit)
        if env_name:
            return Path(os.getenv("ENGINE_CONFIG_DIR", "config/environments")) / f"{env_name}.yaml"
        return None

    @staticmethod
    def _load_yaml_config(path: Path) -> Dict[str, str]:
        """Read flat ``key: value`` lines; comments and nesting are ignored."""

        config: Dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#") or line[0] in " \t" or ":" not in stripped:
                continue
            key, value = (part.strip() for part in stripped.split(":", 1))
            if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
                value = value[1:-1]
            config[key] = value
        return config

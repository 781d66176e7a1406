from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml

from cadence.exceptions import ConfigError


def match_keyword(table: dict, default: float, category: Optional[str], name: Optional[str] = None) -> float:
    """
    Exact category match first, then the first configured key contained in the
    category or the series name (case-insensitive), then ``default``.
    """
    if category and category in table:
        return table[category]
    haystacks = [text.lower() for text in (category, name) if text]
    for key, value in table.items():
        if any(key.lower() in text for text in haystacks):
            return value
    return default

class AppSettings(BaseSettings):
    name: str = "Cadence"
    version: str = "1.0.0"

class EngineSettings(BaseSettings):
    """
    Defaults for the analytics service and its outer callers.
    The engine functions themselves take every parameter explicitly.
    """
    recent_window_days: int = 7
    prior_window_days: int = 7
    impact_window_days: int = 30
    trend_points: int = 14
    max_series: int = 10000  # Hard cap per call (input-size guard)
    parallel_threshold: int = 200  # Work items before the thread pool kicks in
    max_workers: int = 4
    include_inactive: bool = False
    health_window_records: int = 7
    comparison_weeks: int = 4

class CostSettings(BaseSettings):
    # Caller-supplied cost table; the engine never looks these up itself.
    default_per_unit: float = 0.0
    per_category: dict[str, float] = {}

class HealthSettings(BaseSettings):
    # Impact points per unit of the recent daily average, by category keyword.
    default_factor: float = 0.0
    per_category: dict[str, float] = {}
    max_score: float = 100.0

class PathSettings(BaseSettings):
    output_dir: Path = Path("./reports")

class LoggingSettings(BaseSettings):
    log_requests: bool = True
    level: str = "INFO"

class SecuritySettings(BaseSettings):
    max_upload_mb: int = 5  # Hard cap for request bodies (Content-Length guard)

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_nested_delimiter="__", env_file=".env", extra="ignore")
    app: AppSettings = AppSettings()
    engine: EngineSettings = EngineSettings()
    costs: CostSettings = CostSettings()
    health: HealthSettings = HealthSettings()
    paths: PathSettings = PathSettings()
    logging: LoggingSettings = LoggingSettings()
    security: SecuritySettings = SecuritySettings()

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        # Load from default path if exists
        default_path = Path("config/settings.yaml")
        path = config_path or (default_path if default_path.exists() else None)

        if not path:
            return cls()

        try:
            with open(path, "r") as f:
                config_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read settings from {path}: {e}")

        if not isinstance(config_data, dict):
            raise ConfigError(f"Settings file {path} must contain a mapping")

        return cls(**config_data)

    def cost_for(self, category: Optional[str], name: Optional[str] = None) -> float:
        return match_keyword(self.costs.per_category, self.costs.default_per_unit, category, name)

    def health_factor_for(self, category: Optional[str], name: Optional[str] = None) -> float:
        return match_keyword(self.health.per_category, self.health.default_factor, category, name)

settings = Settings.load()

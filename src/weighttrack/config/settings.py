"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from weighttrack.tracking.chart import ChartConfig, TimePeriod
from weighttrack.tracking.models import ProjectionBounds
from weighttrack.tracking.moving_average import MovingAverageType


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".weighttrack"


def _default_db_path() -> Path:
    """Return the default database path."""
    return _default_config_dir() / "weighttrack.db"


def default_config_path() -> Path:
    return _default_config_dir() / "config.yaml"


@dataclass
class DatabaseConfig:
    """Database configuration."""

    path: Path = field(default_factory=_default_db_path)


@dataclass
class AnalyticsConfig:
    """Policy values for the derived metrics."""

    milestone_size: float = 3.0
    trend_deadband: float = 0.1
    regression_points: int = 10
    projection_min_weight: float = 30.0  # same range the entry form accepts
    projection_max_weight: float = 300.0
    weekly_lookback: int = 4
    monthly_lookback: int = 3

    def projection_bounds(self) -> ProjectionBounds:
        return ProjectionBounds(
            min_weight=self.projection_min_weight,
            max_weight=self.projection_max_weight,
        )

    def validate(self) -> None:
        """Raise ValueError for values the analytics cannot work with."""
        for name in ("regression_points", "weekly_lookback", "monthly_lookback"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.milestone_size <= 0:
            raise ValueError(f"milestone_size must be positive, got {self.milestone_size}")
        self.projection_bounds()


@dataclass
class ChartSettings:
    """Default chart options."""

    period: str = "30d"  # "7d", "30d", "90d", "all"
    show_moving_average: bool = True
    moving_average_window: int = 7
    moving_average_type: str = "sma"  # "sma", "ema", "wma", "trend"
    auto_fallback: bool = True

    def to_chart_config(self) -> ChartConfig:
        return ChartConfig(
            period=TimePeriod(self.period),
            show_moving_average=self.show_moving_average,
            moving_average_window=self.moving_average_window,
            moving_average_type=MovingAverageType(self.moving_average_type),
            auto_fallback=self.auto_fallback,
        )


@dataclass
class DefaultsConfig:
    """Default values for various operations."""

    user_id: int = 1
    weight_unit: str = "kg"


def _apply(section: Any, data: dict[str, Any]) -> None:
    """Copy known keys from a YAML mapping onto a config dataclass."""
    for key, value in data.items():
        if key not in section.__dataclass_fields__:
            raise ValueError(f"Unknown setting '{key}' in {type(section).__name__}")
        current = getattr(section, key)
        if isinstance(current, bool):
            value = bool(value)
        elif isinstance(current, int):
            value = int(value)
        elif isinstance(current, float):
            value = float(value)
        setattr(section, key, value)


@dataclass
class Settings:
    """Main application settings."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    chart: ChartSettings = field(default_factory=ChartSettings)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.weighttrack/config.yaml

        Returns:
            Settings instance

        Raises:
            ValueError: If the file contains unknown keys or invalid values
        """
        if config_path is None:
            config_path = default_config_path()

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        settings = cls()

        # Parse database config
        if "database" in data:
            db_data = data["database"] or {}
            if "path" in db_data:
                settings.database.path = Path(db_data["path"]).expanduser()

        if "analytics" in data:
            _apply(settings.analytics, data["analytics"] or {})
            settings.analytics.validate()

        if "chart" in data:
            _apply(settings.chart, data["chart"] or {})
            settings.chart.to_chart_config()

        if "defaults" in data:
            _apply(settings.defaults, data["defaults"] or {})

        return settings

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.weighttrack/config.yaml
        """
        if config_path is None:
            config_path = default_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "database": {
                "path": str(self.database.path),
            },
            "analytics": {
                "milestone_size": self.analytics.milestone_size,
                "trend_deadband": self.analytics.trend_deadband,
                "regression_points": self.analytics.regression_points,
                "projection_min_weight": self.analytics.projection_min_weight,
                "projection_max_weight": self.analytics.projection_max_weight,
                "weekly_lookback": self.analytics.weekly_lookback,
                "monthly_lookback": self.analytics.monthly_lookback,
            },
            "chart": {
                "period": self.chart.period,
                "show_moving_average": self.chart.show_moving_average,
                "moving_average_window": self.chart.moving_average_window,
                "moving_average_type": self.chart.moving_average_type,
                "auto_fallback": self.chart.auto_fallback,
            },
            "defaults": {
                "user_id": self.defaults.user_id,
                "weight_unit": self.defaults.weight_unit,
            },
        }


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings(config_path: Optional[Path] = None) -> Settings:
    """Force reload settings from disk."""
    global _settings
    _settings = Settings.load(config_path)
    return _settings

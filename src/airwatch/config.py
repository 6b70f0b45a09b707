"""Configuration loading utilities for the Airwatch forecasting pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv


@dataclass
class DataConfig:
	"""Paths used by the forecasting pipeline."""

	history_file: Path


@dataclass
class ForecastConfig:
	"""Regression forecaster settings."""

	horizon_hours: int = 24
	history_hours: int = 168
	min_samples: int = 2
	smoothing_window: int = 1


@dataclass
class AlertConfig:
	"""Alert delivery settings."""

	endpoint: Optional[str] = None
	timeout_seconds: float = 10.0
	city: Optional[str] = None


@dataclass
class PipelineConfig:
	"""Top-level configuration for the forecasting pipeline."""

	data: DataConfig
	forecast: ForecastConfig = field(default_factory=ForecastConfig)
	alerts: AlertConfig = field(default_factory=AlertConfig)


DEFAULT_CONFIG_PATH = Path("config/config.yaml")
ALERT_ENDPOINT_ENV = "AIRWATCH_ALERT_ENDPOINT"


def _resolve_path(path_value: str, base_dir: Optional[Path] = None) -> Path:
	"""Resolve a path string to an absolute :class:`Path`.

	The function keeps paths relative to the project root to stay cross-platform.
	"""

	path = Path(path_value)
	if not path.is_absolute() and base_dir is not None:
		path = base_dir / path
	return path


def _find_base_dir(config_path: Path) -> tuple[Path, Path]:
	if config_path.is_absolute():
		return config_path.parent.parent, config_path

	# Look for the project root in the working directory or its parent
	current = Path.cwd()
	if (current / config_path).exists():
		base_dir = current
	elif (current.parent / config_path).exists():
		base_dir = current.parent
	else:
		base_dir = current
	return base_dir, base_dir / config_path


def validate_config(config: PipelineConfig) -> PipelineConfig:
	"""Check setting ranges; raises ``ValueError`` on the first bad value."""

	forecast = config.forecast
	if forecast.horizon_hours < 1:
		raise ValueError(f"forecast.horizon_hours must be a positive integer; got {forecast.horizon_hours}.")
	if forecast.min_samples < 2:
		raise ValueError(f"forecast.min_samples must be at least 2; got {forecast.min_samples}.")
	if forecast.history_hours < forecast.min_samples:
		raise ValueError(
			f"forecast.history_hours ({forecast.history_hours}) must not be smaller than "
			f"forecast.min_samples ({forecast.min_samples})."
		)
	if forecast.smoothing_window < 1:
		raise ValueError(f"forecast.smoothing_window must be at least 1; got {forecast.smoothing_window}.")
	if config.alerts.timeout_seconds <= 0:
		raise ValueError(f"alerts.timeout_seconds must be positive; got {config.alerts.timeout_seconds}.")
	return config


def _setting(section: dict, key: str, default):
	"""Return ``section[key]``, falling back to ``default`` when absent or null."""

	value = section.get(key)
	return default if value is None else value


def load_config(config_path: Optional[Path] = None) -> PipelineConfig:
	"""Load pipeline configuration from YAML.

	A missing file yields the defaults. ``AIRWATCH_ALERT_ENDPOINT`` (read from the
	environment or a ``.env`` file) overrides ``alerts.endpoint``.
	"""

	load_dotenv()

	base_dir, config_path = _find_base_dir(Path(config_path or DEFAULT_CONFIG_PATH))

	payload: dict = {}
	if config_path.exists():
		with open(config_path, "r", encoding="utf-8") as fp:
			payload = yaml.safe_load(fp) or {}

	data_section = payload.get("data") or {}
	forecast_section = payload.get("forecast") or {}
	alerts_section = payload.get("alerts") or {}

	data_cfg = DataConfig(
		history_file=_resolve_path(
			_setting(data_section, "history_file", "data/processed/hourly_history.csv"),
			base_dir,
		),
	)

	forecast_cfg = ForecastConfig(
		horizon_hours=int(_setting(forecast_section, "horizon_hours", 24)),
		history_hours=int(_setting(forecast_section, "history_hours", 168)),
		min_samples=int(_setting(forecast_section, "min_samples", 2)),
		smoothing_window=int(_setting(forecast_section, "smoothing_window", 1)),
	)

	alert_cfg = AlertConfig(
		endpoint=os.getenv(ALERT_ENDPOINT_ENV) or alerts_section.get("endpoint"),
		timeout_seconds=float(_setting(alerts_section, "timeout_seconds", 10.0)),
		city=alerts_section.get("city"),
	)

	return validate_config(PipelineConfig(data=data_cfg, forecast=forecast_cfg, alerts=alert_cfg))

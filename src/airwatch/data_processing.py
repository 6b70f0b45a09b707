"""Sample loading and cleansing utilities for the Airwatch engine."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence, Union

import numpy as np
import pandas as pd

from .alerts import DEFAULT_UNIT, Measurement


POLLUTANTS = ("pm25", "no2", "o3")

COLUMN_ALIASES = {
	"pm25": ("pm25", "PM25", "pm2_5", "PM2_5", "pm2.5", "PM2.5"),
	"no2": ("no2", "NO2", "nitrogen_dioxide"),
	"o3": ("o3", "O3", "ozone"),
}

TIME_COLUMNS = ("timestamp", "time", "datetime", "date")

PM25_BREAKPOINTS = (
	(0.0, 12.0, 0, 50),
	(12.1, 35.4, 51, 100),
	(35.5, 55.4, 101, 150),
	(55.5, 150.4, 151, 200),
	(150.5, 250.4, 201, 300),
	(250.5, 350.4, 301, 400),
	(350.5, 500.4, 401, 500),
)


@dataclass(frozen=True)
class Sample:
	"""One hourly observation of the tracked pollutants (µg/m³)."""

	pm25: float = 0.0
	no2: float = 0.0
	o3: float = 0.0


@dataclass(frozen=True)
class AQILevel:
	level: str
	color: str
	description: str


AQI_LEVELS = (
	(12.0, AQILevel("Good", "#66BB6A", "Air quality is satisfactory")),
	(35.4, AQILevel("Moderate", "#FFA726", "Acceptable for most people")),
	(55.4, AQILevel("Unhealthy for Sensitive Groups", "#FF9800", "Sensitive groups may experience effects")),
	(150.4, AQILevel("Unhealthy", "#EF5350", "Everyone may experience effects")),
	(250.4, AQILevel("Very Unhealthy", "#AB47BC", "Health alert: everyone may experience serious effects")),
)
HAZARDOUS_LEVEL = AQILevel("Hazardous", "#8E24AA", "Health warning of emergency conditions")


SampleLike = Union[Sample, Mapping[str, Any]]
SampleInput = Union[pd.DataFrame, Sequence[SampleLike]]


def _value_or_zero(value: Any) -> float:
	"""Return ``value`` as a float, treating ``None`` and NaN as 0."""

	if value is None:
		return 0.0
	number = float(value)
	if np.isnan(number):
		return 0.0
	return number


def _sample_row(sample: SampleLike) -> tuple[float, ...]:
	if isinstance(sample, Sample):
		return tuple(_value_or_zero(getattr(sample, name)) for name in POLLUTANTS)
	if isinstance(sample, Mapping):
		return tuple(_value_or_zero(sample.get(name)) for name in POLLUTANTS)
	raise TypeError(f"Unsupported sample type: {type(sample).__name__}")


def coerce_samples(samples: SampleInput) -> np.ndarray:
	"""Normalize samples into an ``(n, 3)`` float array ordered as :data:`POLLUTANTS`.

	Accepts :class:`Sample` objects, plain mappings or a DataFrame with pollutant
	columns. Missing pollutant values become 0.
	"""

	if isinstance(samples, pd.DataFrame):
		frame = samples.reindex(columns=list(POLLUTANTS))
		frame = frame.apply(pd.to_numeric, errors="coerce").fillna(0.0)
		return frame.to_numpy(dtype=float)

	rows = [_sample_row(sample) for sample in samples]
	if not rows:
		return np.empty((0, len(POLLUTANTS)), dtype=float)
	return np.asarray(rows, dtype=float)


def _find_column(df: pd.DataFrame, candidates: Iterable[str]) -> str | None:
	for column in candidates:
		if column in df.columns:
			return column
	return None


def load_history_csv(path: Path) -> pd.DataFrame:
	"""Load an hourly pollutant history CSV into a clean, chronologically sorted frame.

	The returned frame has one column per pollutant in :data:`POLLUTANTS` and, when the
	file carries one, a UTC ``timestamp`` column.
	"""

	path = Path(path)
	if not path.exists():
		raise FileNotFoundError(f"History file not found at {path}.")

	df = pd.read_csv(path)

	renames: dict[str, str] = {}
	for pollutant, aliases in COLUMN_ALIASES.items():
		column = _find_column(df, aliases)
		if column is not None:
			renames[column] = pollutant
	if not renames:
		raise ValueError(
			f"File '{path}' has no pollutant columns. Expected at least one of: {', '.join(POLLUTANTS)}"
		)
	df = df.rename(columns=renames)

	columns = list(POLLUTANTS)
	time_column = _find_column(df, TIME_COLUMNS)
	if time_column is not None:
		df = df.rename(columns={time_column: "timestamp"})
		df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True, errors="coerce")
		df = df.dropna(subset=["timestamp"]).sort_values("timestamp", kind="stable")
		columns.insert(0, "timestamp")

	df = df.reindex(columns=columns)
	for pollutant in POLLUTANTS:
		df[pollutant] = pd.to_numeric(df[pollutant], errors="coerce").fillna(0.0)
	return df.reset_index(drop=True)


def moving_average(values: Sequence[float], window_size: int = 3) -> np.ndarray:
	"""Centered moving average for smoothing noisy series.

	Each point averages the window ``[i - floor(w/2), i + ceil(w/2))`` clipped to the
	series, so the output has the same length as the input.
	"""

	if window_size < 1:
		raise ValueError(f"window_size must be at least 1; got {window_size}.")

	data = np.asarray(values, dtype=float)
	index = np.arange(data.size)
	start = np.maximum(0, index - window_size // 2)
	end = np.minimum(data.size, index + -(-window_size // 2))

	cumulative = np.concatenate(([0.0], np.cumsum(data)))
	return (cumulative[end] - cumulative[start]) / (end - start)


def pm25_to_aqi(pm25_value: float) -> int:
	"""Convert PM2.5 concentration to AQI using US EPA breakpoints."""

	# EPA truncates concentrations to one decimal before the lookup
	concentration = np.floor(max(0.0, _value_or_zero(pm25_value)) * 10 + 1e-9) / 10
	for c_low, c_high, i_low, i_high in PM25_BREAKPOINTS:
		if c_low <= concentration <= c_high:
			slope = (i_high - i_low) / (c_high - c_low)
			return int(round(slope * (concentration - c_low) + i_low))
	return PM25_BREAKPOINTS[-1][3]


def aqi_level(pm25_value: float) -> AQILevel:
	"""Map a PM2.5 concentration to its health category."""

	for upper_bound, level in AQI_LEVELS:
		if pm25_value <= upper_bound:
			return level
	return HAZARDOUS_LEVEL


def latest_measurements(history: SampleInput, unit: str = DEFAULT_UNIT) -> list[Measurement]:
	"""Return the most recent sample as one measurement per pollutant."""

	values = coerce_samples(history)
	if values.shape[0] == 0:
		return []
	return [
		Measurement(pollutant=name, value=float(value), unit=unit)
		for name, value in zip(POLLUTANTS, values[-1])
	]

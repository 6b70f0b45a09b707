from datetime import datetime, timezone
from pathlib import Path

import pytest

from airwatch.config import AlertConfig, DataConfig, ForecastConfig, PipelineConfig
from airwatch.data_processing import Sample


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def linear_samples() -> list:
    """Ten hours of steadily rising pollution: y = 2x + 5 for every pollutant."""
    return [Sample(pm25=2 * i + 5, no2=2 * i + 5, o3=2 * i + 5) for i in range(10)]


@pytest.fixture
def noisy_samples() -> list:
    pm25 = [35, 42, 38, 51, 47, 55, 49, 62, 58, 66, 61, 70]
    no2 = [20, 22, 27, 21, 30, 26, 33, 29, 35, 31, 38, 36]
    o3 = [60, 52, 58, 49, 55, 47, 50, 44, 48, 40, 45, 38]
    return [{"pm25": a, "no2": b, "o3": c} for a, b, c in zip(pm25, no2, o3)]


@pytest.fixture
def pipeline_config(tmp_path: Path) -> PipelineConfig:
    return PipelineConfig(
        data=DataConfig(history_file=tmp_path / "history.csv"),
        forecast=ForecastConfig(horizon_hours=6, history_hours=48, min_samples=2, smoothing_window=1),
        alerts=AlertConfig(endpoint=None, timeout_seconds=5.0, city="London"),
    )

"""Forecast utilities for hourly pollutant prediction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from .data_processing import POLLUTANTS, SampleInput, coerce_samples
from .errors import InsufficientDataError
from .regression import (
    MIN_POINTS,
    FittedModel,
    calculate_confidence,
    linear_regression_with_metrics,
    round_half_up,
)

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_HOURS = 24


def _iso_utc(moment: datetime) -> str:
    """ISO-8601 in UTC with milliseconds and a ``Z`` suffix."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment.isoformat(timespec="milliseconds") + "Z"


@dataclass(frozen=True)
class Prediction:
    """One forecasted hour."""

    hour: int
    timestamp: datetime
    pm25: int
    no2: int
    o3: int
    confidence: int

    def to_dict(self) -> dict:
        return {
            "timestamp": _iso_utc(self.timestamp),
            "hour": self.hour,
            "pm25": self.pm25,
            "no2": self.no2,
            "o3": self.o3,
            "confidence": self.confidence,
        }


@dataclass
class ForecastResult:
    """Container for forecast results."""

    models: Dict[str, FittedModel]
    predictions: List[Prediction]
    accuracy: int

    def to_dict(self) -> dict:
        return {
            "predictions": [prediction.to_dict() for prediction in self.predictions],
            "models": {name: model.to_dict() for name, model in self.models.items()},
            "accuracy": self.accuracy,
        }

    def to_frame(self) -> pd.DataFrame:
        """Predictions as a DataFrame, one row per forecasted hour."""
        columns = ["hour", "timestamp", *POLLUTANTS, "confidence"]
        rows = [
            {
                "hour": p.hour,
                "timestamp": p.timestamp,
                "pm25": p.pm25,
                "no2": p.no2,
                "o3": p.o3,
                "confidence": p.confidence,
            }
            for p in self.predictions
        ]
        return pd.DataFrame(rows, columns=columns)


def forecast(
    samples: SampleInput,
    horizon: int = DEFAULT_HORIZON_HOURS,
    now: Optional[datetime] = None,
) -> ForecastResult:
    """Generate hourly pollutant forecasts for the next ``horizon`` hours.

    Args:
        samples: Ordered hourly history, oldest first. ``Sample`` objects, mappings
            or a DataFrame with ``pm25``/``no2``/``o3`` columns.
        horizon: Number of hours to forecast.
        now: Reference time for prediction timestamps (defaults to the current UTC time).

    Returns:
        ForecastResult with one fitted model per pollutant, ``horizon`` predictions and
        the overall accuracy (mean R² as a percentage).
    """
    if isinstance(horizon, bool) or not isinstance(horizon, (int, np.integer)) or horizon < 1:
        raise ValueError(f"horizon must be a positive integer; got {horizon!r}")

    values = coerce_samples(samples)
    n = values.shape[0]
    if n < MIN_POINTS:
        raise InsufficientDataError(available=n, required=MIN_POINTS)

    x = np.arange(n, dtype=float)
    models = {
        name: linear_regression_with_metrics(x, values[:, column])
        for column, name in enumerate(POLLUTANTS)
    }

    now = now or datetime.now(timezone.utc)
    predictions = []
    for step in range(1, int(horizon) + 1):
        future_index = n - 1 + step
        predicted = {
            name: max(0, round_half_up(model.predict(future_index)))
            for name, model in models.items()
        }
        confidences = [calculate_confidence(model, step, n) for model in models.values()]

        predictions.append(
            Prediction(
                hour=step,
                timestamp=now + timedelta(hours=step),
                confidence=round_half_up(sum(confidences) / len(confidences)),
                **predicted,
            )
        )

    mean_r2 = sum(model.r2_score for model in models.values()) / len(models)
    accuracy = round_half_up(mean_r2 * 100)

    logger.debug("Forecast %d hours from %d samples (accuracy=%d)", horizon, n, accuracy)
    return ForecastResult(models=models, predictions=predictions, accuracy=accuracy)

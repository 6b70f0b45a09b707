"""End-to-end forecasting pipeline: history in, forecast and alerts out."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from .alerts import AlertSink, HttpAlertSink, dispatch_alerts, evaluate_alerts
from .config import PipelineConfig, load_config, validate_config
from .data_processing import (
    POLLUTANTS,
    SampleInput,
    aqi_level,
    coerce_samples,
    latest_measurements,
    load_history_csv,
    moving_average,
    pm25_to_aqi,
)
from .errors import InsufficientDataError
from .forecast import forecast

logger = logging.getLogger(__name__)

ALGORITHM = "linear_regression"


def _prepare_history(history: SampleInput, config: PipelineConfig) -> pd.DataFrame:
    """Trim the history to the configured window and optionally smooth it."""
    frame = pd.DataFrame(coerce_samples(history), columns=list(POLLUTANTS))
    frame = frame.tail(config.forecast.history_hours).reset_index(drop=True)

    if len(frame) < config.forecast.min_samples:
        raise InsufficientDataError(available=len(frame), required=config.forecast.min_samples)

    window = config.forecast.smoothing_window
    if window > 1:
        for pollutant in POLLUTANTS:
            frame[pollutant] = moving_average(frame[pollutant].to_numpy(), window_size=window)
    return frame


def run_forecast_pipeline(
    history: SampleInput,
    city: Optional[str] = None,
    config: PipelineConfig | None = None,
    sink: AlertSink | None = None,
    now: datetime | None = None,
) -> dict:
    """Run the forecasting pipeline on an ordered hourly history.

    This function:
    1. Trims (and optionally smooths) the history window
    2. Fits the regression forecaster
    3. Evaluates alerts on the most recent sample and dispatches them to ``sink``
    4. Returns a JSON-serializable payload

    Args:
        history: Ordered hourly samples, oldest first
        city: Location label carried into the payload and alert submissions
        config: Pipeline configuration; loaded from ``config/config.yaml`` when omitted
        sink: Optional alert sink; falls back to ``HttpAlertSink`` when an endpoint is configured
        now: Reference time for prediction timestamps
    """
    config = config or load_config()
    city = city or config.alerts.city

    frame = _prepare_history(history, config)
    logger.info("Forecasting %d hours for %s from %d samples", config.forecast.horizon_hours, city, len(frame))
    result = forecast(frame, horizon=config.forecast.horizon_hours, now=now)

    # Alerts use the raw latest reading, not the smoothed one
    measurements = latest_measurements(history)
    alert_result = evaluate_alerts(measurements)

    if sink is None and config.alerts.endpoint:
        sink = HttpAlertSink(config.alerts.endpoint, timeout=config.alerts.timeout_seconds)
    if sink is not None and alert_result.triggered:
        delivered = dispatch_alerts(alert_result.alerts, sink, city=city)
        logger.info("Delivered %d of %d alerts for %s", delivered, len(alert_result.alerts), city)

    current_pm25 = next(m.value for m in measurements if m.pollutant == "pm25")
    level = aqi_level(current_pm25)

    return {
        "success": True,
        "city": city,
        "forecast": [prediction.to_dict() for prediction in result.predictions],
        "models": {
            name: {"r2_score": model.r2_score, "mae": model.mae}
            for name, model in result.models.items()
        },
        "accuracy": result.accuracy,
        "algorithm": ALGORITHM,
        "current": {
            "pm25": current_pm25,
            "aqi": pm25_to_aqi(current_pm25),
            "level": level.level,
            "description": level.description,
        },
        "alerts": alert_result.to_dict(),
    }


def run_forecast_from_file(
    history_path: Path | None = None,
    city: Optional[str] = None,
    config_path: Path | None = None,
    sink: AlertSink | None = None,
    horizon: int | None = None,
) -> dict:
    """Load the history CSV named by the configuration (or ``history_path``) and run the pipeline.

    ``horizon`` overrides ``forecast.horizon_hours`` and is validated like the file value.
    """
    config = load_config(config_path)
    if horizon is not None:
        config.forecast = replace(config.forecast, horizon_hours=horizon)
        validate_config(config)
    history = load_history_csv(history_path or config.data.history_file)
    return run_forecast_pipeline(history, city=city, config=config, sink=sink)

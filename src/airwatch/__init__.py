"""Airwatch pollutant forecasting and health-alert engine.

This package fits per-pollutant regression forecasts from an hourly history and
classifies instantaneous measurements into health alerts.
"""

from .alerts import Alert, AlertResult, HttpAlertSink, Measurement, dispatch_alerts, evaluate_alerts
from .config import PipelineConfig, load_config
from .data_processing import Sample
from .errors import AirwatchError, InsufficientDataError
from .forecast import ForecastResult, Prediction, forecast
from .pipeline import run_forecast_pipeline
from .regression import FittedModel

__all__ = [
	"Alert",
	"AlertResult",
	"HttpAlertSink",
	"Measurement",
	"dispatch_alerts",
	"evaluate_alerts",
	"PipelineConfig",
	"load_config",
	"Sample",
	"AirwatchError",
	"InsufficientDataError",
	"ForecastResult",
	"Prediction",
	"forecast",
	"run_forecast_pipeline",
	"FittedModel",
]

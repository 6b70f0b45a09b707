"""Threshold-based health alerts for instantaneous pollutant measurements.

Every pollutant maps to an ordered tuple of tiers, most severe first. A measurement
produces at most one alert: the first tier whose threshold it strictly exceeds.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional, Union

import requests

logger = logging.getLogger(__name__)

DEFAULT_UNIT = "µg/m³"

SEVERITY_ORDER = ("moderate", "unhealthy", "very_unhealthy", "hazardous")


@dataclass(frozen=True)
class ThresholdTier:
	threshold: float
	severity: str
	message: str


def _standard_tiers(name: str, hazardous: float, very_unhealthy: float, unhealthy: float) -> tuple[ThresholdTier, ...]:
	return (
		ThresholdTier(hazardous, "hazardous", f"Hazardous Air Quality - {name} levels are extremely high"),
		ThresholdTier(very_unhealthy, "very_unhealthy", f"Very Unhealthy Air Quality - {name} levels are very high"),
		ThresholdTier(unhealthy, "unhealthy", f"Unhealthy Air Quality - {name} levels exceed safe limits"),
	)


# µg/m³; NO2 and O3 have no moderate tier
THRESHOLDS: dict[str, tuple[ThresholdTier, ...]] = {
	"pm25": _standard_tiers("PM2.5", 250, 150, 100) + (
		ThresholdTier(55, "moderate", "Moderate Air Quality - Sensitive groups should limit outdoor exposure"),
	),
	"no2": _standard_tiers("NO2", 400, 200, 40),
	"o3": _standard_tiers("Ozone", 800, 400, 200),
}


@dataclass(frozen=True)
class Measurement:
	"""A single instantaneous reading."""

	pollutant: str
	value: float
	unit: str = DEFAULT_UNIT


@dataclass(frozen=True)
class Alert:
	pollutant: str
	value: float
	threshold: float
	message: str
	severity: str

	def to_dict(self) -> dict[str, Any]:
		return asdict(self)


@dataclass
class AlertResult:
	"""Outcome of one evaluation call."""

	alerts: list[Alert] = field(default_factory=list)

	@property
	def triggered(self) -> bool:
		return bool(self.alerts)

	def to_dict(self) -> dict[str, Any]:
		return {"triggered": self.triggered, "alerts": [alert.to_dict() for alert in self.alerts]}


MeasurementLike = Union[Measurement, Mapping[str, Any]]
AlertSink = Callable[[Optional[str], Alert], Any]


def classify(pollutant: str, value: float) -> Optional[ThresholdTier]:
	"""Return the most severe tier exceeded by ``value``, or ``None``."""

	for tier in THRESHOLDS.get(pollutant, ()):
		if value > tier.threshold:
			return tier
	return None


def _unpack(measurement: MeasurementLike) -> tuple[Any, Any]:
	if isinstance(measurement, Measurement):
		return measurement.pollutant, measurement.value
	pollutant = measurement.get("pollutant", measurement.get("parameter"))
	return pollutant, measurement.get("value")


def evaluate_alerts(measurements: Iterable[MeasurementLike]) -> AlertResult:
	"""Evaluate each measurement against its pollutant's thresholds.

	Alerts follow input order. Unknown pollutants and missing values produce no alert.
	"""

	alerts: list[Alert] = []
	for measurement in measurements:
		pollutant, value = _unpack(measurement)
		if pollutant not in THRESHOLDS or value is None:
			continue
		tier = classify(pollutant, value)
		if tier is None:
			continue
		alerts.append(
			Alert(
				pollutant=pollutant,
				value=value,
				threshold=tier.threshold,
				message=tier.message,
				severity=tier.severity,
			)
		)
	return AlertResult(alerts=alerts)


def dispatch_alerts(alerts: Iterable[Alert], sink: AlertSink, city: Optional[str] = None) -> int:
	"""Submit each alert to ``sink``; a failed submission does not stop the rest.

	Returns the number of alerts the sink accepted.
	"""

	delivered = 0
	for alert in alerts:
		try:
			sink(city, alert)
		except Exception:
			logger.exception("Failed to store %s alert for %s (%s)", alert.severity, alert.pollutant, city)
			continue
		delivered += 1
	return delivered


class HttpAlertSink:
	"""Posts alerts as JSON to an HTTP collection endpoint."""

	def __init__(self, endpoint: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
		self.endpoint = endpoint
		self.timeout = timeout
		self.session = session or requests.Session()

	def __call__(self, city: Optional[str], alert: Alert) -> None:
		payload = {
			"city": city,
			"parameter": alert.pollutant,
			"value": alert.value,
			"threshold": alert.threshold,
			"message": alert.message,
			"severity": alert.severity,
		}
		response = self.session.post(self.endpoint, json=payload, timeout=self.timeout)
		response.raise_for_status()
		logger.info("Alert stored for %s: %s", city, alert.message)

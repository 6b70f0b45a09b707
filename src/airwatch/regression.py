"""Ordinary least-squares fitting with in-sample accuracy metrics."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Sequence

import numpy as np
from sklearn.metrics import mean_absolute_error, r2_score

from .errors import InsufficientDataError

logger = logging.getLogger(__name__)

MIN_POINTS = 2


@dataclass(frozen=True)
class FittedModel:
	"""Linear model ``y = slope * x + intercept`` with its in-sample metrics."""

	slope: float
	intercept: float
	r2_score: float
	mae: float

	def predict(self, index: float) -> float:
		return self.slope * index + self.intercept

	def to_dict(self) -> dict[str, float]:
		return asdict(self)


def round_half_up(value: float) -> int:
	"""Round to the nearest integer with ``.5`` going towards positive infinity."""

	return int(np.floor(value + 0.5))


def linear_regression_with_metrics(x: Sequence[float], y: Sequence[float]) -> FittedModel:
	"""Fit ``y`` against ``x`` by least squares and score the fit on the same data.

	R² is clamped into [0, 1]. A series with zero variance scores 1 when the fit
	reproduces it exactly and 0 otherwise. MAE is measured in-sample.
	"""

	x_arr = np.asarray(x, dtype=float)
	y_arr = np.asarray(y, dtype=float)
	n = x_arr.size
	if n != y_arr.size:
		raise ValueError(f"x and y must have the same length; got {n} and {y_arr.size}.")
	if n < MIN_POINTS:
		raise InsufficientDataError(available=n, required=MIN_POINTS)

	if np.all(y_arr == y_arr[0]):
		# Exact fit; keeps float noise out of the slope
		slope = 0.0
		intercept = float(y_arr[0])
	else:
		sum_x = x_arr.sum()
		sum_y = y_arr.sum()
		sum_xy = np.dot(x_arr, y_arr)
		sum_xx = np.dot(x_arr, x_arr)

		denominator = n * sum_xx - sum_x * sum_x
		if denominator == 0:
			raise ValueError("Independent variable has zero variance; cannot fit a slope.")

		slope = float((n * sum_xy - sum_x * sum_y) / denominator)
		intercept = float((sum_y - slope * sum_x) / n)

	y_pred = slope * x_arr + intercept
	r2 = float(r2_score(y_arr, y_pred, force_finite=True))
	mae = float(mean_absolute_error(y_arr, y_pred))

	model = FittedModel(
		slope=slope,
		intercept=intercept,
		r2_score=min(1.0, max(0.0, r2)),
		mae=mae,
	)
	logger.debug("Fitted %d points: slope=%.4f intercept=%.4f r2=%.4f mae=%.4f", n, slope, intercept, model.r2_score, mae)
	return model


def calculate_confidence(model: FittedModel, future_index: int, data_length: int) -> int:
	"""Confidence (0-100) for the ``future_index``-th step ahead of ``data_length`` samples.

	Decays linearly to zero at twice the history length and scales with the fit's R².
	"""

	distance_factor = max(0.0, 1 - future_index / (data_length * 2))
	return round_half_up(distance_factor * model.r2_score * 100)

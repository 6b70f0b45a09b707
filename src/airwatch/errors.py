"""Exception types raised by the Airwatch forecasting engine."""


class AirwatchError(Exception):
	"""Base class for errors raised by this package."""


class InsufficientDataError(AirwatchError, ValueError):
	"""Raised when there are too few historical samples to fit a forecast."""

	def __init__(self, available: int, required: int = 2):
		self.available = available
		self.required = required
		super().__init__(
			f"Insufficient historical data for forecast: need at least {required} samples, got {available}."
		)

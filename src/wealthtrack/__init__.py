"""Portfolio valuation and performance analytics engine."""

__version__ = "0.1.0"

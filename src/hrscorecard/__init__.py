"""Scorecard aggregation and technical test scoring engine."""

__version__ = "0.1.0"

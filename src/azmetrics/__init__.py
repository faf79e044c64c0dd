"""Concurrent Azure utilization metrics collection through the az CLI."""

__version__ = "0.1.0"

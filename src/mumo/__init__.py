"""Mumo Comics content engine."""

__version__ = "0.1.0"

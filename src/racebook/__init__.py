"""Racebook: horse-racing bet tracking API."""

__version__ = "0.1.0"

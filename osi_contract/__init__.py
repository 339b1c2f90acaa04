"""Sensor view configuration negotiation and logical detection data contract."""

__version__ = "0.1.0"

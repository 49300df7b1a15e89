"""Prometheus service discovery for Packet devices."""

__version__ = "0.1.0"

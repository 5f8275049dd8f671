"""Reclaim: disk space cleanup engine."""

__version__ = "0.1.0"

"""Adaptive follow-up scheduling for outbound email."""

__version__ = "0.1.0"

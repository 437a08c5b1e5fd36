"""Telecommunications registry: terminals, communications and billing."""

__version__ = "0.1.0"

"""Placeholder substitution for configuration templates."""

__version__ = "0.3.0"

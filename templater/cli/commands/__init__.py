"""CLI command handlers."""

from .render import render_templates

__all__ = ['render_templates']

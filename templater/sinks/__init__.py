"""Output sinks for rendered templates."""

from .output import OutputSink

__all__ = ['OutputSink']

"""
Template engine.
Runs each TemplateUnit through extraction, resolution and substitution, then
hands the result to the sink. Units are processed sequentially and the first
fatal error aborts the whole run; earlier writes are not rolled back.
"""

import logging
from typing import Iterable

from .sinks.output import OutputSink
from .sources.walker import TemplateUnit
from .variables.substitution import Resolver

logger = logging.getLogger(__name__)


class TemplateEngine:
    """Renders template units against a resolver and emits them."""

    def __init__(self, resolver: Resolver, sink: OutputSink):
        self.resolver = resolver
        self.sink = sink

    def render_unit(self, unit: TemplateUnit) -> str:
        logger.debug(f"Rendering {unit.label} -> {unit.output_path or 'stdout'}")
        return self.resolver.render(unit.text, source=unit.label)

    def run(self, units: Iterable[TemplateUnit]) -> int:
        """
        Render and emit every unit in order.

        Returns:
            Number of units processed
        """
        count = 0
        for unit in units:
            self.sink.write(unit, self.render_unit(unit))
            count += 1

        logger.info(f"Processed {count} template(s)")
        return count

"""Output sink for rendered templates.

Writes to stdout or to files. File writes follow a write-then-rename pattern:
1. Write content to a temporary sibling (*.tmp)
2. Copy the source template's permission bits onto it
3. Atomic replace onto the final path
"""

import logging
import os
import shutil
import sys
from pathlib import Path
from typing import List, Optional, TextIO, Tuple

from ..sources.walker import TemplateUnit

logger = logging.getLogger(__name__)


class OutputSink:
    """Emits rendered text for each TemplateUnit."""

    def __init__(self, dry_run: bool = False, stream: Optional[TextIO] = None):
        """Initialize the sink.

        Args:
            dry_run: Report what would be written instead of writing
            stream: Stream used for units without an output path (default stdout)
        """
        self.dry_run = dry_run
        self.stream = stream
        self.planned: List[Tuple[str, str]] = []

    def write(self, unit: TemplateUnit, text: str) -> None:
        destination = str(unit.output_path) if unit.output_path else 'stdout'

        if self.dry_run:
            size = len(text.encode('utf-8'))
            logger.info(f"[DRY RUN] Would write {size} bytes to {destination}")
            self.planned.append((destination, text))
            return

        if unit.output_path is None:
            stream = self.stream if self.stream is not None else sys.stdout
            stream.write(text)
            stream.flush()
            return

        self._write_file(unit.output_path, text, unit.source_path)
        logger.info(f"Wrote {unit.label} -> {destination}")

    def _write_file(self, target: Path, content: str, source: Optional[Path]) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)

        # Same directory keeps the rename on one filesystem
        temp_path = target.parent / f".{target.name}.tmp"

        try:
            with open(temp_path, 'w', encoding='utf-8', newline='') as f:
                f.write(content)
            if source is not None:
                shutil.copymode(source, temp_path)
            os.replace(temp_path, target)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise

"""Template source selection and directory scanning."""

import glob
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, TextIO

from ..exceptions import ConfigError, NotFoundError

logger = logging.getLogger(__name__)

STDIN_MARKER = '-'
DEFAULT_EXTENSION = 'template'


@dataclass
class TemplateUnit:
    """One piece of template text paired with its destination."""
    text: str
    output_path: Optional[Path] = None  # None means standard output
    source_path: Optional[Path] = None

    @property
    def label(self) -> str:
        """Human-readable origin used in logs and error messages."""
        return str(self.source_path) if self.source_path else '<text>'


class SourceWalker:
    """
    Turns the selected template source into an ordered list of TemplateUnits.

    Exactly one of text, input_path or directory may be given. With none
    given (or input_path '-') the template is read from stdin.
    """

    def __init__(
        self,
        text: Optional[str] = None,
        input_path: Optional[str] = None,
        directory: Optional[str] = None,
        output: Optional[str] = None,
        extension: str = DEFAULT_EXTENSION,
        recursive: bool = False,
        stdin: Optional[TextIO] = None
    ):
        selected = [
            flag for flag, value in (
                ('text', text), ('input', input_path), ('directory', directory)
            ) if value is not None
        ]
        if len(selected) > 1:
            raise ConfigError(
                f"Only one template source may be given, got: {', '.join(selected)}"
            )

        self.text = text
        self.input_path = input_path
        self.directory = Path(directory) if directory is not None else None
        self.output = Path(output) if output else None
        self.extension = self._normalize_extension(extension)
        self.recursive = recursive
        self.stdin = stdin

    @staticmethod
    def _normalize_extension(extension: str) -> str:
        extension = (extension or '').lstrip('.')
        if not extension:
            raise ConfigError("Extension must not be empty")
        return extension

    def units(self) -> List[TemplateUnit]:
        """Produce the template units for this invocation."""
        if self.directory is not None:
            return self._directory_units()
        if self.text is not None:
            return [TemplateUnit(text=self.text, output_path=self._single_output())]
        if self.input_path is None or self.input_path == STDIN_MARKER:
            stream = self.stdin if self.stdin is not None else sys.stdin
            return [TemplateUnit(text=stream.read(), output_path=self._single_output())]
        return [self._file_unit(Path(self.input_path))]

    def _single_output(self) -> Optional[Path]:
        if self.output is not None and self.output.is_dir():
            raise ConfigError(f"Output path is a directory: {self.output}")
        return self.output

    def _file_unit(self, path: Path) -> TemplateUnit:
        if not path.exists():
            raise NotFoundError(path, kind="Template file")
        if not path.is_file():
            raise ConfigError(f"Template input is not a file: {path}")
        return TemplateUnit(
            text=self._read(path),
            output_path=self._single_output(),
            source_path=path
        )

    def _directory_units(self) -> List[TemplateUnit]:
        root = self.directory
        if not root.exists():
            raise NotFoundError(root, kind="Template directory")
        if not root.is_dir():
            raise ConfigError(f"Template directory is not a directory: {root}")
        if self.output is not None and self.output.exists() and not self.output.is_dir():
            raise ConfigError(f"Output path exists and is not a directory: {self.output}")

        units = []
        for relative in self.scan(root, self.extension, self.recursive):
            output_path = None
            if self.output is not None:
                output_path = self.output / self.strip_extension(relative, self.extension)
            units.append(TemplateUnit(
                text=self._read(root / relative),
                output_path=output_path,
                source_path=root / relative
            ))

        if not units:
            logger.info(f"No *.{self.extension} files found under {root}")
        return units

    @staticmethod
    def scan(root: Path, extension: str, recursive: bool = False) -> List[Path]:
        """
        List files under root whose name ends in '.<extension>'.

        Returns:
            Relative paths, sorted by POSIX form for deterministic ordering
        """
        if recursive:
            pattern = str(Path(glob.escape(str(root))) / '**' / f'*.{glob.escape(extension)}')
        else:
            pattern = str(Path(glob.escape(str(root))) / f'*.{glob.escape(extension)}')

        matches = []
        for match in glob.glob(pattern, recursive=recursive):
            match_path = Path(match)
            if match_path.is_file():
                matches.append(match_path.relative_to(root))

        return sorted(matches, key=lambda p: p.as_posix())

    @staticmethod
    def strip_extension(relative: Path, extension: str) -> Path:
        """Drop the trailing '.<extension>' from a relative path."""
        suffix = f'.{extension}'
        return relative.with_name(relative.name[:-len(suffix)])

    @staticmethod
    def _read(path: Path) -> str:
        try:
            # newline='' keeps CRLF line endings intact
            with open(path, 'r', encoding='utf-8', newline='') as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Failed to read template {path}: {e}")

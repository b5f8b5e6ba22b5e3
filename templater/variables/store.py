"""
Variable store built from ordered sources.

Sources are applied strictly in declaration order:
- ambient environment (optional, always first)
- inline NAME=VALUE assignments
- variable files (line-oriented NAME=VALUE, or YAML/JSON mappings)

Later writes win when two sources set the same name.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import yaml

from ..exceptions import ConfigError

logger = logging.getLogger(__name__)

STRUCTURED_SUFFIXES = {'.yaml', '.yml', '.json'}


def parse_assignment(item: str) -> Tuple[str, str]:
    """Split an inline NAME=VALUE assignment, uppercasing NAME."""
    if '=' not in item:
        raise ConfigError(f"Invalid assignment format: {item}. Expected NAME=VALUE")
    name, value = item.split('=', 1)
    name = name.strip()
    if not name:
        raise ConfigError(f"Invalid NAME in assignment: {item}")
    return name.upper(), value


@dataclass
class StoreOperation:
    """One declared source, applied against a store in declaration order."""
    kind: str  # 'assign' or 'file'
    name: Optional[str] = None
    value: Optional[str] = None
    path: Optional[Path] = None
    must_exist: bool = True

    @classmethod
    def assign(cls, item: str) -> 'StoreOperation':
        name, value = parse_assignment(item)
        return cls(kind='assign', name=name, value=value)

    @classmethod
    def file(cls, path, must_exist: bool = True) -> 'StoreOperation':
        return cls(kind='file', path=Path(path), must_exist=must_exist)

    def apply(self, store: 'VariableStore') -> None:
        if self.kind == 'assign':
            store.set(self.name, self.value)
        elif self.kind == 'file':
            store.set_from_file(self.path, self.must_exist)
        else:
            raise ConfigError(f"Unknown store operation: {self.kind}")


class VariableStore:
    """
    Name -> value mapping used for token resolution.

    Names are stored as given; callers uppercase token names before lookup.
    """

    def __init__(self, values: Optional[Mapping[str, str]] = None):
        self._values: Dict[str, str] = {}
        if values:
            for name, value in values.items():
                self.set(name, value)

    @classmethod
    def build(
        cls,
        operations: Iterable[StoreOperation],
        environ: Optional[Mapping[str, str]] = None
    ) -> 'VariableStore':
        """
        Build a store from the ambient environment plus declared sources.

        Args:
            operations: Store operations in declaration order
            environ: Optional base layer (e.g. os.environ), overridden by everything else

        Returns:
            Populated VariableStore
        """
        store = cls(environ)
        for operation in operations:
            operation.apply(store)
        logger.debug(f"Variable store built with {len(store)} entries")
        return store

    def set(self, name: str, value: str) -> None:
        """Register or overwrite a binding."""
        self._values[name] = value

    def set_from_file(self, path, must_exist: bool = True) -> None:
        """
        Apply every entry of a variable file as a set() call.

        Args:
            path: Variable file path
            must_exist: Raise ConfigError when the file is absent; otherwise ignore it

        Raises:
            ConfigError: Missing mandatory file, unreadable or malformed content
        """
        path = Path(path)
        if not path.exists():
            if must_exist:
                raise ConfigError(f"Variable file not found: {path}")
            logger.debug(f"Optional variable file not found, skipping: {path}")
            return
        if not path.is_file():
            raise ConfigError(f"Variable file is not a regular file: {path}")

        try:
            text = path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Failed to read variable file {path}: {e}")

        if path.suffix.lower() in STRUCTURED_SUFFIXES:
            entries = self._parse_structured(text, path)
        else:
            entries = self._parse_lines(text, path)

        for name, value in entries:
            self.set(name, value)
        logger.debug(f"Loaded {len(entries)} variables from {path}")

    def _parse_lines(self, text: str, path: Path) -> List[Tuple[str, str]]:
        entries = []
        for lineno, line in enumerate(text.splitlines(), start=1):
            stripped = line.lstrip()
            if not stripped or stripped.startswith('#'):
                continue
            if '=' not in line:
                raise ConfigError(f"{path}:{lineno}: expected NAME=VALUE, got: {line.strip()}")
            name, value = line.split('=', 1)
            name = name.strip()
            if not name:
                raise ConfigError(f"{path}:{lineno}: empty variable name")
            entries.append((name, value))
        return entries

    def _parse_structured(self, text: str, path: Path) -> List[Tuple[str, str]]:
        # BaseLoader keeps every scalar as a string
        try:
            data = yaml.load(text, Loader=yaml.BaseLoader)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse variable file {path}: {e}")

        if data is None:
            return []
        if not isinstance(data, dict):
            raise ConfigError(
                f"Variable file {path} must contain a mapping, got {type(data).__name__}"
            )

        entries = []
        for name, value in data.items():
            if isinstance(value, (dict, list)):
                raise ConfigError(f"Variable '{name}' in {path} must be a scalar value")
            entries.append((str(name), str(value)))
        return entries

    def lookup(self, name: str) -> Optional[str]:
        """Return the bound value, or None if the name is not set."""
        return self._values.get(name)

    def names(self) -> List[str]:
        return sorted(self._values)

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

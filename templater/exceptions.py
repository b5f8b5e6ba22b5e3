"""Templater exceptions."""

from typing import List, Optional


class TemplaterError(Exception):
    """Base class for fatal templating errors.

    Every subclass carries the process exit code the CLI maps it to.
    """

    exit_code = 1


class ConfigError(TemplaterError):
    """Invalid or contradictory options, or an unusable variable file."""

    exit_code = 2


class NotFoundError(TemplaterError):
    """An explicitly named input file or directory does not exist."""

    exit_code = 1

    def __init__(self, path, kind: str = "Input"):
        self.path = path
        super().__init__(f"{kind} not found: {path}")


class MissingVariableError(TemplaterError):
    """Raised when referenced tokens have no value under the strict policy."""

    exit_code = 3

    def __init__(self, names: List[str], source: Optional[str] = None):
        self.names = sorted(set(names))
        self.source = source

        message = f"Undefined variables: {', '.join(self.names)}"
        if source:
            message += f" (in {source})"
        super().__init__(message)


class CyclicReferenceError(TemplaterError):
    """Raised when an indirection chain loops or exceeds the depth limit."""

    exit_code = 4

    def __init__(self, chain: List[str], max_depth: Optional[int] = None):
        self.chain = list(chain)
        self.max_depth = max_depth

        path = " -> ".join(self.chain)
        if max_depth is not None:
            message = f"Indirection chain exceeds {max_depth} hops: {path}"
        else:
            message = f"Cyclic variable reference: {path}"
        super().__init__(message)

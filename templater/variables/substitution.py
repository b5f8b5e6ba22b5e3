"""
Token extraction, resolution and substitution.

Placeholder grammar: ``${`` optional whitespace, NAME, optional whitespace, ``}``
where NAME matches ``[A-Za-z0-9_.-]+``. Lookups use the uppercased name.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Set

from ..exceptions import CyclicReferenceError, MissingVariableError
from .store import VariableStore

logger = logging.getLogger(__name__)

# Pattern to match ${ NAME } tokens with optional interior whitespace
TOKEN_PATTERN = re.compile(r'\$\{\s*([A-Za-z0-9_.-]+)\s*\}')

# Value prefix that marks an indirection to another variable
INDIRECTION_MARKER = '$'

DEFAULT_MAX_DEPTH = 16


def extract_tokens(text: str) -> Set[str]:
    """Return the distinct token names referenced in text, whitespace-stripped."""
    return {match.group(1) for match in TOKEN_PATTERN.finditer(text)}


def substitute(text: str, resolutions: Dict[str, Optional[str]]) -> str:
    """
    Replace every placeholder whose name has a resolution.

    Args:
        text: Template text
        resolutions: Token name -> value, or None to leave the placeholder as written

    Returns:
        Text with resolved placeholders replaced
    """
    def replace_token(match):
        value = resolutions.get(match.group(1))
        if value is None:
            return match.group(0)
        return value

    # Callable replacement: values are never parsed as re escapes or group references
    return TOKEN_PATTERN.sub(replace_token, text)


class Resolver:
    """
    Resolves token names against a VariableStore.

    Policy:
    - fail_on_missing: unresolved names raise MissingVariableError, otherwise
      they resolve to None and the placeholder is kept
    - expand_vars: a value starting with '$' names another variable, followed
      until a plain value is reached
    - max_depth: upper bound on indirection hops
    """

    def __init__(
        self,
        store: VariableStore,
        expand_vars: bool = False,
        fail_on_missing: bool = True,
        max_depth: int = DEFAULT_MAX_DEPTH
    ):
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")
        self.store = store
        self.expand_vars = expand_vars
        self.fail_on_missing = fail_on_missing
        self.max_depth = max_depth

    def resolve(self, name: str) -> Optional[str]:
        """
        Resolve a single token name.

        Returns:
            Final value, or None when the name is missing and the policy is non-strict

        Raises:
            MissingVariableError: Name (or a link in its chain) is unset under the strict policy
            CyclicReferenceError: Indirection chain revisits a name or exceeds max_depth
        """
        chain: List[str] = []
        current = name.upper()

        while True:
            if current in chain:
                raise CyclicReferenceError(chain + [current])
            chain.append(current)

            value = self.store.lookup(current)
            if value is None:
                if self.fail_on_missing:
                    raise MissingVariableError([current if len(chain) > 1 else name])
                logger.debug(f"Leaving unresolved token: {name}")
                return None

            if not (self.expand_vars and value.startswith(INDIRECTION_MARKER)):
                return value

            target = self._target_name(value)
            if not target:
                # bare "$" or "${}" names nothing: literal value
                return value

            if len(chain) > self.max_depth:
                raise CyclicReferenceError(chain, max_depth=self.max_depth)

            current = target
            logger.debug(f"Following indirection {chain[-1]} -> {current}")

    def _target_name(self, value: str) -> str:
        target = value[len(INDIRECTION_MARKER):].strip()
        if target.startswith('{') and target.endswith('}'):
            target = target[1:-1].strip()
        return target.upper()

    def resolve_all(self, names: Iterable[str], source: Optional[str] = None) -> Dict[str, Optional[str]]:
        """
        Resolve every distinct name, reporting all missing names at once.

        Args:
            names: Token names as extracted
            source: Description of the template, used in error messages

        Returns:
            Token name -> resolved value (None for tokens left unresolved)
        """
        resolutions: Dict[str, Optional[str]] = {}
        missing: Set[str] = set()

        for name in sorted(set(names)):
            try:
                resolutions[name] = self.resolve(name)
            except MissingVariableError as e:
                missing.update(e.names)

        if missing:
            raise MissingVariableError(sorted(missing), source=source)
        return resolutions

    def render(self, text: str, source: Optional[str] = None) -> str:
        """Extract, resolve and substitute all tokens in text."""
        names = extract_tokens(text)
        logger.debug(f"{source or '<text>'}: {len(names)} distinct tokens")
        if not names:
            return text
        return substitute(text, self.resolve_all(names, source=source))

"""Render command implementation."""

import logging
import os
import sys
from argparse import Namespace
from typing import List, Optional, Sequence, Tuple

from templater.engine import TemplateEngine
from templater.exceptions import ConfigError, TemplaterError
from templater.sinks.output import OutputSink
from templater.sources.walker import SourceWalker
from templater.variables.store import StoreOperation, VariableStore
from templater.variables.substitution import Resolver


logger = logging.getLogger(__name__)

HELP_HINT = "See 'templater --help' for usage."


def build_operations(sources: Optional[Sequence[Tuple[str, str]]]) -> List[StoreOperation]:
    """Convert ordered (kind, value) pairs from the command line into store operations."""
    operations = []
    for kind, value in sources or []:
        if kind == 'assign':
            operations.append(StoreOperation.assign(value))
        elif kind == 'file':
            operations.append(StoreOperation.file(value, must_exist=True))
        elif kind == 'optional-file':
            operations.append(StoreOperation.file(value, must_exist=False))
        else:
            raise ConfigError(f"Unknown variable source: {kind}")
    return operations


def configure_logging(args: Namespace) -> None:
    log_level = getattr(logging, args.log_level.upper())
    if args.debug:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.ERROR
    elif args.verbose:
        log_level = logging.DEBUG

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )


def render_templates(args: Namespace, stdin=None, stdout=None) -> int:
    """
    Build the variable store, collect template units and render them.

    Returns:
        0 on success, otherwise the exit code of the fatal error
    """
    configure_logging(args)

    try:
        if args.max_depth < 1:
            raise ConfigError(f"--max-depth must be at least 1, got {args.max_depth}")

        environ = None if args.no_env else os.environ
        store = VariableStore.build(build_operations(args.sources), environ=environ)

        walker = SourceWalker(
            text=args.text,
            input_path=args.input,
            directory=args.directory,
            output=args.output,
            extension=args.extension,
            recursive=args.recursive,
            stdin=stdin
        )
        units = walker.units()

        resolver = Resolver(
            store,
            expand_vars=args.expand_vars,
            fail_on_missing=args.fail_on_missing,
            max_depth=args.max_depth
        )
        sink = OutputSink(dry_run=args.dry_run, stream=stdout)

        TemplateEngine(resolver, sink).run(units)
        if args.dry_run:
            logger.info("[DRY RUN] Nothing was written")
        return 0

    except TemplaterError as e:
        logger.error(f"Error: {e}")
        logger.error(HELP_HINT)
        return e.exit_code
    except OSError as e:
        logger.error(f"File error: {e}")
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 1

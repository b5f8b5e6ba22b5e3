"""Main CLI entry point for templater."""

import argparse
import sys
from typing import Optional

from .. import __version__
from ..sources.walker import DEFAULT_EXTENSION
from ..variables.substitution import DEFAULT_MAX_DEPTH
from .commands import render_templates


class OrderedSourceAction(argparse.Action):
    """Appends (kind, value) to one shared list so -e/-f/-F keep their relative order."""

    def __call__(self, parser, namespace, values, option_string=None):
        sources = getattr(namespace, self.dest, None)
        if sources is None:
            sources = []
            setattr(namespace, self.dest, sources)
        sources.append((self.const, values))


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the templater CLI."""
    parser = argparse.ArgumentParser(
        prog='templater',
        description='Replace ${ NAME } placeholders in text, files or directories'
    )

    # Template source
    parser.add_argument(
        '-t', '--text',
        type=str,
        help='Inline template text'
    )
    parser.add_argument(
        '-i', '--input',
        type=str,
        metavar='FILE',
        help="Template file ('-' reads standard input)"
    )
    parser.add_argument(
        '-d', '--directory',
        type=str,
        metavar='DIR',
        help='Directory of template files'
    )
    parser.add_argument(
        '-o', '--output',
        type=str,
        metavar='PATH',
        help='Output file (or directory with --directory); default is standard output'
    )
    parser.add_argument(
        '-r', '--recursive',
        action='store_true',
        help='Descend into subdirectories with --directory'
    )
    parser.add_argument(
        '-x', '--extension',
        type=str,
        default=DEFAULT_EXTENSION,
        help=f'Template file extension for --directory (default: {DEFAULT_EXTENSION})'
    )

    # Variable sources, applied in command-line order
    parser.add_argument(
        '-e', '--var',
        dest='sources',
        action=OrderedSourceAction,
        const='assign',
        metavar='NAME=VALUE',
        help='Set a variable (can be specified multiple times)'
    )
    parser.add_argument(
        '-f', '--var-file',
        dest='sources',
        action=OrderedSourceAction,
        const='file',
        metavar='PATH',
        help='Load variables from a NAME=VALUE or YAML/JSON file; must exist'
    )
    parser.add_argument(
        '-F', '--optional-var-file',
        dest='sources',
        action=OrderedSourceAction,
        const='optional-file',
        metavar='PATH',
        help='Load variables from a file if it exists'
    )
    parser.add_argument(
        '--no-env',
        action='store_true',
        help='Do not use the process environment as the base variable layer'
    )

    # Resolution policy
    policy = parser.add_mutually_exclusive_group()
    policy.add_argument(
        '-s', '--silent',
        dest='fail_on_missing',
        action='store_false',
        help='Leave unresolved placeholders in place instead of failing'
    )
    policy.add_argument(
        '--fail-on-missing',
        dest='fail_on_missing',
        action='store_true',
        help='Fail when a placeholder has no value (default)'
    )
    parser.set_defaults(fail_on_missing=True)
    parser.add_argument(
        '--expand-vars',
        action='store_true',
        help="Follow values of the form $NAME to other variables"
    )
    parser.add_argument(
        '--max-depth',
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f'Maximum indirection hops with --expand-vars (default: {DEFAULT_MAX_DEPTH})'
    )
    parser.add_argument(
        '-n', '--dry-run',
        action='store_true',
        help='Render but do not write; report what would be written'
    )

    # Logging
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress non-error output'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warn', 'error'],
        default='info',
        help='Set log level'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)
    return render_templates(parsed_args)


if __name__ == '__main__':
    sys.exit(main())

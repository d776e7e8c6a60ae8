#!/usr/bin/env python3
# PYTHON_ARGCOMPLETE_OK
"""
Command-line interface for isced-fields
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import argcomplete

from ._version import __version__
from .catalog import render_catalogs, write_catalogs
from .config import Config
from .errors import HarvestError
from .fields import FieldsOfStudy
from .harvest import TreeBuilder
from .skos import NodeFetcher
from .table import flatten, save_table
from .translations import count_translations, extract_translations, replicate_locales, to_messages

logger = logging.getLogger(__name__)


def build_command(
    config: Config,
    table_path: Path | None = None,
    translations_dir: Path | None = None,
    fetcher: NodeFetcher | None = None,
) -> int:
    """Harvest the scheme and write the lookup table and catalogs.

    Nothing is written unless the harvest and every derived artifact succeed.

    Returns:
        0 on success, 1 on error
    """
    table_path = table_path or config.table_path
    translations_dir = translations_dir or config.translations_dir
    fetcher = fetcher or NodeFetcher(timeout=config.timeout, min_delay=config.min_delay)

    logger.info("Harvesting %s", config.scheme_uri)
    try:
        builder = TreeBuilder(fetcher)
        taxonomy = builder.build(config.scheme_uri)
        table = flatten(taxonomy)
        translations = extract_translations(taxonomy)
    except HarvestError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    messages = replicate_locales(to_messages(translations), config.locale_copies)

    print(f"{builder.stats.requests} requests made.")
    print(f"{count_translations(translations)} translations.")
    print(f"{sum(len(m) for m in messages.values())} messages.")

    # Everything is rendered before the first file is touched
    catalogs = render_catalogs(messages, config.catalog_domain)
    save_table(table, table_path)
    print(f"✅ Wrote {len(table)} fields of study to {table_path}")
    written = write_catalogs(catalogs, translations_dir, config.catalog_domain)
    print(f"✅ Wrote {len(written)} catalogs to {translations_dir}")
    return 0


def lookup_command(table_path: Path, code: str) -> int:
    """Print the record for a single code."""
    if not table_path.exists():
        print(f"❌ Table not found: {table_path}", file=sys.stderr)
        return 1

    fields = FieldsOfStudy.from_file(table_path)
    if not fields.exists(code):
        print(f"No field of study with code '{code}'", file=sys.stderr)
        return 1

    print(json.dumps({code: fields.get(code).to_dict()}, indent=2, ensure_ascii=False))
    return 0


def tree_command(table_path: Path) -> int:
    """Print the hierarchy stored in a table."""
    if not table_path.exists():
        print(f"❌ Table not found: {table_path}", file=sys.stderr)
        return 1

    fields = FieldsOfStudy.from_file(table_path)
    for broad, narrows in fields.tree().items():
        print(f"{broad} {fields.label(broad)}")
        for narrow, detaileds in narrows.items():
            print(f"  {narrow} {fields.label(narrow)}")
            for detailed in detaileds:
                print(f"    {detailed} {fields.label(detailed)}")
    return 0


def config_command(show: bool = False, show_path: bool = False) -> int:
    """Show configuration information."""
    config = Config()

    if show_path:
        if config.path:
            print(config.path)
        else:
            print("No configuration file found")
        return 0

    if config.path:
        print(f"# Configuration loaded from: {config.path}")
    else:
        print("# No configuration file found, showing defaults")
    print()
    print(json.dumps(config.data, indent=2))
    return 0


def _setup_logging(verbose: bool, quiet: bool) -> None:
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main() -> int:
    """Main entry point for the CLI."""
    config = Config()

    parser_cli = argparse.ArgumentParser(
        description="isced-fields - Harvest ISCED-F fields of study",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Harvest the scheme, write data/isced.json and translations/
  isced-fields build

  # Look up one field of study in the generated table
  isced-fields lookup 0711

  # Show current configuration
  isced-fields config --show
        """
    )
    parser_cli.add_argument(
        '--version', '-V',
        action='version',
        version=f'%(prog)s {__version__}'
    )
    parser_cli.add_argument('--verbose', '-v', action='store_true', help='Log every request')
    parser_cli.add_argument('--quiet', '-q', action='store_true', help='Only log warnings and errors')

    subparsers = parser_cli.add_subparsers(dest='command', help='Command to run')

    config_parser = subparsers.add_parser('config', help='Show configuration')
    config_parser.add_argument('--show', action='store_true', help='Show merged configuration')
    config_parser.add_argument('--path', action='store_true', help='Show config file path')

    build_parser = subparsers.add_parser('build', help='Harvest the scheme and write all artifacts')
    build_parser.add_argument('--table', '-t', type=Path, help=f'Lookup table output (default: {config.table_path})')
    build_parser.add_argument('--translations', type=Path,
                              help=f'Catalog output directory (default: {config.translations_dir})')
    build_parser.add_argument('--scheme', type=str, help=f'Scheme URI (default: {config.scheme_uri})')

    lookup_parser = subparsers.add_parser('lookup', help='Show one field of study from the table')
    lookup_parser.add_argument('code', type=str, help='Field code, e.g. 0711')
    lookup_parser.add_argument('--table', '-t', type=Path, help='Lookup table (default: from config)')

    tree_parser = subparsers.add_parser('tree', help='Show the hierarchy from the table')
    tree_parser.add_argument('--table', '-t', type=Path, help='Lookup table (default: from config)')

    argcomplete.autocomplete(parser_cli)

    args = parser_cli.parse_args()
    _setup_logging(args.verbose, args.quiet)

    if args.command == 'config':
        return config_command(show=args.show, show_path=args.path)
    elif args.command == 'build':
        if args.scheme:
            config.data['scheme_uri'] = args.scheme
        return build_command(config, args.table, args.translations)
    elif args.command == 'lookup':
        return lookup_command(args.table or config.table_path, args.code)
    elif args.command == 'tree':
        return tree_command(args.table or config.table_path)
    else:
        parser_cli.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())

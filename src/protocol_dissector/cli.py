#!/usr/bin/env python3
"""
Command-line interface for the protocol dissector.

Usage:
    protocol-dissector --hex "00 01 00 00 00 06 01 03 00 00 00 01"
    protocol-dissector --text "GET / HTTP/1.1\\r\\nHost: localhost\\r\\n\\r\\n"
    protocol-dissector --file a.bin --file b.bin --out results.csv
    protocol-dissector --serve --port 18080
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Tuple

from .classifier import classify
from .config import DEFAULT_HOST, DEFAULT_PORT, LOG_FORMAT, MAX_INPUT_BYTES
from .export import export_csv, export_json, format_result, summarize
from .server import DissectorServer
from .utils import HexDecodeError, parse_hex, unescape_text

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Multi-protocol byte-stream dissector',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Classify a hex dump
  protocol-dissector --hex "FF FB 18"

  # Classify captured messages and export to CSV
  protocol-dissector --file msg1.bin --file msg2.bin --out results.csv

  # Run the TCP service
  protocol-dissector --serve --host 0.0.0.0 --port 18080
        """
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        '--hex',
        type=str,
        help='Message as hex bytes, e.g. "00 01 FF"'
    )
    source.add_argument(
        '--text',
        type=str,
        help='Message as text; \\r, \\n, \\t and \\xNN escapes are interpreted'
    )
    source.add_argument(
        '--file',
        type=str,
        action='append',
        help='Path to a raw message file (repeatable, one message per file)'
    )
    source.add_argument(
        '--serve',
        action='store_true',
        help='Run the TCP classification service'
    )

    parser.add_argument(
        '--host',
        type=str,
        default=DEFAULT_HOST,
        help=f'Listen address for --serve (default: {DEFAULT_HOST})'
    )
    parser.add_argument(
        '--port',
        type=int,
        default=DEFAULT_PORT,
        help=f'Listen port for --serve (default: {DEFAULT_PORT})'
    )
    parser.add_argument(
        '--out',
        type=str,
        help='Output file path (CSV or JSON)'
    )
    parser.add_argument(
        '--format',
        type=str,
        choices=['csv', 'json'],
        default=None,
        help='Output format (default: csv, or json for a .json --out path)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase log verbosity (-v info, -vv debug)'
    )
    return parser


def read_inputs(args: argparse.Namespace) -> List[Tuple[str, bytes]]:
    """
    Collect (source, payload) pairs from the command line.

    Raises:
        HexDecodeError: if --hex is malformed
        OSError: if a file cannot be read
        ValueError: if a file exceeds MAX_INPUT_BYTES
    """
    if args.hex is not None:
        return [('hex', parse_hex(args.hex))]
    if args.text is not None:
        return [('text', unescape_text(args.text))]

    inputs = []
    for name in args.file:
        path = Path(name)
        size = path.stat().st_size
        if size > MAX_INPUT_BYTES:
            raise ValueError(f"{path} is too large ({size} bytes > {MAX_INPUT_BYTES})")
        inputs.append((str(path), path.read_bytes()))
    return inputs


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.serve and (args.out is not None or args.format is not None):
        parser.error("--out and --format cannot be used with --serve")

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT)

    if args.serve:
        server = DissectorServer(args.host, args.port)
        try:
            server.start()
        except OSError as e:
            print(f"Error starting server: {e}", file=sys.stderr)
            return 1
        return 0

    try:
        inputs = read_inputs(args)
    except HexDecodeError as e:
        parser.error(str(e))
    except (OSError, ValueError) as e:
        print(f"Error reading input: {e}", file=sys.stderr)
        return 1

    sources = [source for source, _ in inputs]
    results = [classify(payload) for _, payload in inputs]
    logger.info(f"Classified {len(results)} messages")

    if args.out:
        output_path = Path(args.out)
        try:
            if args.format == 'json' or output_path.suffix == '.json':
                export_json(results, str(output_path), sources)
            else:
                export_csv(results, str(output_path), sources)
        except OSError as e:
            print(f"Error exporting results: {e}", file=sys.stderr)
            return 1
        print(f"Results exported to: {output_path}")
    else:
        for source, result in zip(sources, results):
            print(f"[{source}] {format_result(result)}")
            print(f"   raw_hex = {result.raw_hex}")
            print(f"   {result.message}")

    if len(results) > 1:
        print("\n" + "=" * 60)
        print("CLASSIFICATION SUMMARY")
        print("=" * 60)
        for row in summarize(results).itertuples(index=False):
            print(f"  {row.protocol:15s}: {row.messages:4d} messages")

    return 0


if __name__ == '__main__':
    sys.exit(main())

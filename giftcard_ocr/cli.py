#!/usr/bin/env python3
"""
Parse a saved OCR transcript and print the extracted gift card fields.

Usage:
    giftcard-ocr transcript.txt
    giftcard-ocr transcript.txt --debug
    cat transcript.txt | giftcard-ocr - --today 2026-01-01
"""

import sys
import json
import argparse
from datetime import date
from typing import List, Optional

from giftcard_ocr.services.parser import GiftCardParser


def _read_text(path: str) -> str:
    if path == '-':
        return sys.stdin.read()
    with open(path, encoding='utf-8', errors='replace') as f:
        return f.read()


def main(argv: Optional[List[str]] = None) -> int:
    arg_parser = argparse.ArgumentParser(description="Extract gift card fields from OCR text")
    arg_parser.add_argument('path', help="Text file with the OCR transcript, or - for stdin")
    arg_parser.add_argument('--debug', action='store_true', help="Include match provenance")
    arg_parser.add_argument(
        '--today',
        type=date.fromisoformat,
        default=None,
        help="Reference date (YYYY-MM-DD) for future-date checks"
    )
    args = arg_parser.parse_args(argv)

    try:
        text = _read_text(args.path)
    except OSError as e:
        print(f"Error reading {args.path}: {e}", file=sys.stderr)
        return 1

    debug = {} if args.debug else None
    result = GiftCardParser().parse(text, today=args.today, _debug=debug)

    output = result.model_dump(by_alias=True)
    if debug is not None:
        output['debug'] = debug

    print(json.dumps(output, indent=2))
    return 0


if __name__ == '__main__':
    sys.exit(main())

"""``waypost parse`` and ``waypost normalize`` — inspect URIs from the shell."""

import argparse
import json
import sys

from waypost.errors import URISyntaxError
from waypost.uri.parser import normalize, parse


def run_parse(args: argparse.Namespace) -> None:
    """Print the parsed document for ``args.uri`` as JSON."""
    try:
        document = parse(args.uri, args.charset)
    except URISyntaxError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    print(json.dumps(document.to_dict(), indent=2, ensure_ascii=False))


def run_normalize(args: argparse.Namespace) -> None:
    """Print each URI in ``args.uris`` in normalized form, one per line.

    Invalid URIs are reported on stderr; the exit status is 1 if any failed.
    """
    failed = False
    for raw in args.uris:
        try:
            print(normalize(raw, args.charset))
        except URISyntaxError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            failed = True
    if failed:
        raise SystemExit(1)

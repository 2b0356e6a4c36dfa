#!/usr/bin/env python3
"""
concurl — bulk URL fetcher

Reads URLs (one per line) from stdin and fetches them with a fixed pool of
worker threads. Requests to the same domain are spaced by --delay; requests
to different domains run in parallel. Every response is written to
<output>/<domain>/<first 16 hex chars of sha256(url)> with a small metadata
header, and one "<path> <status> <url>" line is printed per saved response.

Failed URLs are never retried. With -v they are reported on stderr.
SIGINT/SIGTERM stops reading input and drops queued URLs; requests already
in flight are allowed to finish.

Usage:
  pip install -e .
  cat urls.txt | concurl -c 20 -d 5s -o out --timeout 30s -v

"""

import argparse
import io
import re
import sys

from configs import (
    DEFAULT_CONCURRENCY,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PER_DOMAIN_DELAY,
    MAX_RESPONSE_SIZE,
    REQUEST_TIMEOUT,
    USER_AGENT,
    FetchConfig,
)
from crawler import configure_logging, install_signal_handlers, run_bulk_fetch, shutdown_event

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0, None: 1.0}


def parse_duration(value: str) -> float:
    """'500ms', '5s', '2m', '1h' or a bare number of seconds."""
    m = _DURATION_RE.match(value)
    if not m:
        raise argparse.ArgumentTypeError(f"invalid duration: {value!r}")
    return float(m.group(1)) * _DURATION_UNITS[m.group(2)]


def parse_header(value: str):
    name, sep, val = value.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"header must look like 'Name: value', got {value!r}")
    return name.strip(), val.strip()


def build_parser():
    parser = argparse.ArgumentParser(description="Bulk URL fetcher with per-domain rate limiting")
    parser.add_argument("-c", "--concurrency", type=int, default=DEFAULT_CONCURRENCY, help="Number of worker threads")
    parser.add_argument("-d", "--delay", type=parse_duration, default=DEFAULT_PER_DOMAIN_DELAY,
                        help="Delay between requests to the same domain (e.g. 5s, 500ms)")
    parser.add_argument("-o", "--output", default=DEFAULT_OUTPUT_DIR, help="Output directory")
    parser.add_argument("-t", "--timeout", type=parse_duration, default=REQUEST_TIMEOUT, help="Request timeout")
    parser.add_argument("--max-size", type=int, default=MAX_RESPONSE_SIZE, help="Maximum response size in bytes")
    parser.add_argument("--insecure", action="store_true", help="Skip TLS certificate verification")
    parser.add_argument("--ua", default=USER_AGENT, help="User-Agent header")
    parser.add_argument("-H", "--header", type=parse_header, action="append", default=[],
                        help="Extra request header 'Name: value' (repeatable)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Report failures and skipped lines on stderr")
    parser.add_argument("--logfile", type=str, default=None, help="Optional rotating logfile path")
    return parser


def main(argv=None, stdin=None, stdout=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = FetchConfig(
            concurrency=args.concurrency,
            delay=args.delay,
            output_dir=args.output,
            timeout=args.timeout,
            max_size=args.max_size,
            insecure=args.insecure,
            user_agent=args.ua,
            verbose=args.verbose,
            headers=tuple(args.header),
        )
    except ValueError as exc:
        parser.error(str(exc))

    configure_logging(verbose=args.verbose, logfile=args.logfile)
    install_signal_handlers()

    if stdin is None:
        stdin = io.TextIOWrapper(sys.stdin.buffer, encoding="utf-8", errors="replace")
    return run_bulk_fetch(stdin, config, out=stdout, stop_event=shutdown_event)


if __name__ == "__main__":
    sys.exit(main())

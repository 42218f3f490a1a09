# /// script
# requires-python = "==3.12.*"
# ///

"""
Generates random IDs from the 62-character alphabet [a-zA-Z0-9], with optional collision-risk info.

Usage:
    uv run ./random_id_maker.py  # default length is 7
    uv run ./random_id_maker.py --length 12
    uv run ./random_id_maker.py --length 12 --count 5
    uv run ./random_id_maker.py --length 12 --info
    uv run ./random_id_maker.py --table

Uniqueness:
`--info` and `--table` report the birthday-bound chance that at least two IDs collide
    among a batch of 100_000 IDs of the given length, e.g.:
  { "length": 7,  "combinations": "3.52e+12", "collision_probability": "0.142%", "safety": "moderate" }
  { "length": 8,  "combinations": "2.18e+14", "collision_probability": "0.002%", "safety": "safe" }
Length 7 rates 'moderate'; lengths 8 and up rate 'safe'.
"""

import argparse
import json
import logging
import os
import sys

import zapid
from zapid_errors import ZapidError

log_level_name: str = os.getenv('LOG_LEVEL', 'INFO').upper()
log_level = getattr(
    logging, log_level_name, logging.INFO
)  # maps the string name to the corresponding logging level constant; defaults to INFO
logging.basicConfig(
    level=log_level,
    format='[%(asctime)s] %(levelname)s [%(module)s-%(funcName)s()::%(lineno)d] %(message)s',
    datefmt='%d/%b/%Y %H:%M:%S',
)
log = logging.getLogger(__name__)


## -- helper functions ----------------------------------------------


def positive_int(value: str) -> int:
    """
    Argparse type for `--count`.

    Called by `parse_args()`.
    """
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f'invalid int value: {value!r}') from None
    if number < 1:
        raise argparse.ArgumentTypeError(f'must be at least 1, got {number}')
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parses command-line arguments.

    Called by `main()`.
    """
    parser = argparse.ArgumentParser(description='Generate a random ID')
    parser.add_argument(
        '-l',
        '--length',
        type=int,
        default=zapid.DEFAULT_LENGTH,
        help=f'Length of the generated ID ({zapid.MIN_LENGTH}-{zapid.MAX_LENGTH}, default: {zapid.DEFAULT_LENGTH})',
    )
    parser.add_argument('-n', '--count', type=positive_int, default=1, help='Number of IDs to generate (default: 1)')
    parser.add_argument('--info', action='store_true', help='Print each ID as JSON, with collision-risk info')
    parser.add_argument('--table', action='store_true', help='Print collision-risk info for every supported length')
    return parser.parse_args(argv)


def print_table() -> None:
    """
    Prints the risk table, one JSON object per line.

    Called by `main()`.
    """
    for row in zapid.risk_table():
        print(json.dumps(row))


def print_ids(length: int, count: int, info: bool) -> None:
    """
    Generates and prints `count` IDs.

    Called by `main()`.
    """
    log.debug(f'length, ``{length}``; count, ``{count}``; info, ``{info}``')
    for _ in range(count):
        if info:
            result: zapid.ZapidResult = zapid.generate_with_info(length)
            print(json.dumps(result.as_dict()))
        else:
            print(zapid.generate(length))


## -- main ----------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """
    Main controller function; returns the exit status.

    Called by dundermain, and by the `random-id-maker` console script.
    """
    args = parse_args(argv)
    if args.table:
        print_table()
        return 0
    try:
        print_ids(args.length, args.count, args.info)
    except ZapidError as e:
        log.debug(f'generation failed: ``{e!r}``')
        print(f'error: {e}', file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())

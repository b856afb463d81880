#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""decode_beacon.py
Minimal executable that decodes beacon payloads given on the command line.

Example
-------
    decode-beacon 1234567890ABCDEF1234567890ABCDEF00030007C6 --rssi -70
"""

import argparse
import logging
import sys
from typing import List, Optional

from app_logger import logger, set_level
from beacon import decode


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Decode iBeacon-style payloads into identity, join code and distance."
    )
    parser.add_argument(
        "payloads",
        nargs="+",
        metavar="PAYLOAD",
        help="Hex payload: uuid(32) major(4) minor(4) tx power(2)",
    )
    parser.add_argument(
        "-r",
        "--rssi",
        type=int,
        required=True,
        help="Measured signal strength in dBm, e.g. -70",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log rejected payloads and timings at DEBUG level",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        set_level(logging.DEBUG)

    failures = 0
    for payload in args.payloads:
        record = decode(payload, args.rssi)
        if record is None:
            failures += 1
            print(f"not a beacon: {payload}")
            continue
        print(f"{record} DISTANCE: {record.rounded_distance():.1f} m")

    if failures:
        logger.info("%d of %d payloads rejected", failures, len(args.payloads))
        return 1
    return 0


# ----------------------------------------------------------------------
# Main entry point
# ----------------------------------------------------------------------
if __name__ == "__main__":
    sys.exit(main())

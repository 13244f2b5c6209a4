"""
Seismos: Multiscale Acoustic Wave Models

File: cli.py
Description: Command line entry point.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import argparse
import logging
import sys

from Seismos.errors import SeismosError
from Seismos.logging import get_logger, set_level

logger = get_logger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="seismos",
        description="Multiscale (GMsFEM) acoustic wave simulation")
    parser.add_argument("input",
                        type=str,
                        help="TOML input file")
    parser.add_argument("-o", "--output-dir",
                        dest="output_dir",
                        default=None,
                        type=str,
                        help="Output directory. Overrides options.output_dir")
    parser.add_argument("--print-matrices",
                        dest="print_matrices",
                        action="store_true",
                        help="Write the local bases and the fine and coarse operators in Matrix Market format")
    parser.add_argument("--reference-fine",
                        dest="reference_fine",
                        action="store_true",
                        help="Also integrate the full fine system as a reference")
    parser.add_argument("-q", "--quiet",
                        action="store_true",
                        help="Only log warnings and errors")
    return parser


def main(argv=None):
    ns = build_parser().parse_args(argv)

    # Imported late so that --help does not pay for numba compilation
    from Seismos.main import Seismos

    # Loggers are created on import
    if ns.quiet:
        set_level(logging.WARNING)

    try:
        sim = Seismos(vars(ns))
        sim.solve()
    except SeismosError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())

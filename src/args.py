"""Argument parsing functionality for externpack."""

import argparse

from constants import Constants


def _positive_int(text):
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {text}")
    return value


def _positive_float(text):
    value = float(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive number: {text}")
    return value


def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="externpack",
        description=(
            "externpack - Install and prune node_modules for bundled artifacts"
        ),
        add_help=True,
    )

    parser.add_argument("-r", "--report",
                        dest="REPORT",
                        help="Path to the compilation report (JSON)",
                        action="store", type=str,
                        required=True)
    parser.add_argument("-o", "--output-path",
                        dest="OUTPUT_PATH",
                        help=f"Bundler output directory (default: {Constants.DEFAULT_OUTPUT_PATH})",
                        action="store", type=str)
    parser.add_argument("--project-root",
                        dest="PROJECT_ROOT",
                        help="Project root directory (default: current directory)",
                        action="store", type=str)

    parser.add_argument("--include-modules",
                        dest="INCLUDE_MODULES",
                        help="Enable packing of external modules.",
                        action="store_true")
    parser.add_argument("--package-path",
                        dest="PACKAGE_PATH",
                        help=f"Project manifest, relative to the project root (default: {Constants.DEFAULT_PACKAGE_PATH})",
                        action="store", type=str)
    parser.add_argument("--max-buffer",
                        dest="MAX_BUFFER",
                        help="Maximum captured npm output in bytes",
                        action="store", type=_positive_int)
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help="Timeout in seconds for each npm invocation",
                        action="store", type=_positive_float)
    parser.add_argument("-w", "--workers",
                        dest="WORKERS",
                        help="Number of artifacts materialized concurrently (default: 1)",
                        action="store", type=_positive_int)
    parser.add_argument("--npm",
                        dest="NPM_COMMAND",
                        help="npm executable to invoke",
                        action="store", type=str)
    parser.add_argument("--dry-run",
                        dest="DRY_RUN",
                        help="Resolve dependencies and print the plan as JSON without installing.",
                        action="store_true")

    parser.add_argument("-v", "--verbose",
                        dest="VERBOSE",
                        help="Log timing of each packing phase.",
                        action="store_true")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)

    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)

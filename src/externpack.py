"""externpack - per-artifact node_modules packing for bundled builds

    Returns:
        int: Exit code
"""
import json
import logging
import os
import subprocess
import sys

from args import parse_args
from cli_config import build_pack_config
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from common.process import CommandError
from compilation.report import load_report
from constants import Constants, ExitCodes
from packer.errors import ConfigError, ManifestError, MaterializationError, ReportContractError
from packer.pipeline import pack_external_modules

logger = logging.getLogger(__name__)


def _setup_logging(args) -> None:
    """Configure logging based on CLI arguments."""
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    configure_logging()

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def run(args) -> int:
    """Run a packing operation for parsed arguments and return the exit code."""
    try:
        config = build_pack_config(args)
    except ConfigError as e:
        logger.error("%s", e)
        return ExitCodes.FILE_ERROR.value

    if not config.enabled:
        logger.info("External module packing is not enabled, nothing to do.")
        return ExitCodes.SUCCESS.value

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="run", target=config.project_root),
        )

    try:
        report = load_report(args.REPORT, config.project_root)
    except (OSError, ValueError, ReportContractError) as e:
        logger.error("Couldn't load compilation report %s: %s", args.REPORT, e)
        return ExitCodes.FILE_ERROR.value

    try:
        result = pack_external_modules(report, config, dry_run=bool(getattr(args, "DRY_RUN", False)))
    except (ManifestError, ReportContractError) as e:
        logger.error("%s", e)
        return ExitCodes.FILE_ERROR.value
    except (CommandError, subprocess.TimeoutExpired, json.JSONDecodeError) as e:
        logger.error("Package manager failure: %s", e)
        return ExitCodes.PACKAGE_MANAGER_ERROR.value
    except MaterializationError as e:
        for failure in e.failures:
            logger.debug("Artifact failure cause: %r", failure.__cause__)
        logger.error("%s", e)
        return ExitCodes.ARTIFACT_ERROR.value

    if getattr(args, "DRY_RUN", False):
        sys.stdout.write(json.dumps(result.to_dict(), indent=2) + "\n")
    else:
        logger.info("Packed external modules for %d artifact(s).", len(result.artifacts))
    return ExitCodes.SUCCESS.value


def main():
    """Main function of the program."""
    args = parse_args()
    _setup_logging(args)
    sys.exit(run(args))


if __name__ == "__main__":
    main()

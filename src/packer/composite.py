"""Composite install of the union of all artifacts' dependencies.

All artifacts share one staging install so that npm's cache is used once for
every package, instead of once per artifact.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable, List

from common.logging_utils import log_phase, Timer
from constants import Constants
from packer.models import PackConfig

logger = logging.getLogger(__name__)


def build_composite(dependency_lists: Iterable[List[str]]) -> List[str]:
    """Union resolved dependency lists, keeping first-seen order."""
    return list(dict.fromkeys(dep for deps in dependency_lists for dep in deps))


def install_composite(composite: List[str], config: PackConfig, client) -> str:
    """Write the placeholder manifest and install composite into the staging directory.

    Failures of the install propagate unchanged.

    Returns:
        Path of the staging directory.
    """
    staging_dir = config.staging_dir
    os.makedirs(staging_dir, exist_ok=True)
    with open(os.path.join(staging_dir, Constants.PACKAGE_JSON_FILE), "w", encoding="utf-8") as file:
        file.write("{}")

    logger.info("Packing external modules: %s", ", ".join(composite))
    if not composite:
        logger.debug("No external modules to install")
        return staging_dir

    with Timer() as t:
        client.install(composite, staging_dir)
    log_phase(logger, config.verbose, "Package took [%d ms]", t.duration_ms())
    return staging_dir

"""Extraction of the external module set of one compiled artifact."""

from __future__ import annotations

import logging
from typing import Dict, List

from compilation.models import CompileResult
from common.logging_utils import extra_context, is_debug_enabled
from packer.classifier import classify_module
from packer.models import ExternalRef
from packer.origin import find_external_origin

logger = logging.getLogger(__name__)


def get_external_modules(result: CompileResult) -> List[ExternalRef]:
    """Collect the distinct (origin, external) pairs of a compile result.

    Pairs are de-duplicated by value and returned in first-seen order.
    """
    externals: Dict[str, ExternalRef] = {}
    for chunk in result.chunks:
        for module in chunk.modules:
            name = classify_module(module)
            if name is None:
                continue
            origin = find_external_origin(module.issuer)
            ref = ExternalRef(
                external=name,
                origin=origin.raw_request if origin is not None else None,
            )
            externals.setdefault(ref.key, ref)

    if is_debug_enabled(logger):
        logger.debug(
            "Extracted external modules",
            extra=extra_context(
                event="decision",
                component="externals",
                target=result.output_path,
                count=len(externals),
            ),
        )
    return list(externals.values())

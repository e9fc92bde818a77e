"""Packing pipeline: fetch, resolve, install, materialize.

(1) The dependency graph snapshot is fetched once and the dependencies of
every artifact are resolved. (2) Their union is installed once into a
staging directory. (3) Each artifact gets a copy of the staged node_modules,
pruned against its own package.json.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from compilation.models import CompilationReport
from common.logging_utils import extra_context, is_debug_enabled, log_phase, Timer
from package_manager.npm import NpmClient
from packer.composite import build_composite, install_composite
from packer.materialize import materialize_all, plan_artifact
from packer.models import PackConfig, PackResult, ProjectManifest
from packer.versions import check_snapshot_consistency, load_project_manifest

logger = logging.getLogger(__name__)


def fetch_dependency_graph(config: PackConfig, client) -> Dict[str, Any]:
    """Query the production dependency graph of the project, one level deep."""
    log_phase(logger, config.verbose, "Fetch dependency graph from %s", config.manifest_path)
    with Timer() as t:
        graph = client.list_dependency_graph(os.path.dirname(config.manifest_path))
    log_phase(logger, config.verbose, "Dependency graph took [%d ms]", t.duration_ms())
    return graph


def plan_pack(report: CompilationReport, manifest: ProjectManifest, graph: Dict[str, Any]) -> PackResult:
    """Resolve every artifact and the composite list without touching the filesystem."""
    plans = [plan_artifact(result, manifest, graph) for result in report.results]
    return PackResult(
        composite=build_composite(plan.dependencies for plan in plans),
        artifacts=plans,
    )


def pack_external_modules(
    report: CompilationReport,
    config: PackConfig,
    client: Optional[Any] = None,
    dry_run: bool = False,
) -> PackResult:
    """Install and prune node_modules for every artifact in report.

    Args:
        report: Compilation report of the build.
        config: Packing configuration.
        client: Package manager client; an NpmClient built from config by default.
        dry_run: Only resolve and return the plan.

    Returns:
        The composite dependency list and per-artifact manifests.

    Raises:
        ManifestError: If the project manifest cannot be loaded.
        CommandError: If the graph query or the composite install fails.
        MaterializationError: If one or more artifacts failed.
    """
    if not config.enabled:
        logger.debug("External module packing disabled")
        return PackResult(skipped=True)

    if client is None:
        client = NpmClient(config.npm_command, config.max_buffer, config.timeout)

    manifest = load_project_manifest(config.manifest_path)
    graph = fetch_dependency_graph(config, client)
    check_snapshot_consistency(manifest, graph)

    planned = plan_pack(report, manifest, graph)
    if is_debug_enabled(logger):
        logger.debug(
            "Resolved composite dependencies",
            extra=extra_context(
                event="decision",
                component="pipeline",
                count=len(planned.composite),
                artifacts=len(planned.artifacts),
            ),
        )
    if dry_run:
        return planned

    install_composite(planned.composite, config, client)
    artifacts = materialize_all(report.results, manifest, graph, config, client)
    return PackResult(composite=planned.composite, artifacts=artifacts)

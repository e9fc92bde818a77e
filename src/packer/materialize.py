"""Per-artifact materialization of node_modules.

For each artifact the full staging install is copied next to the compiled
output and then pruned against an artifact-specific package.json, so that npm
removes every package the artifact does not need. The staging directory is
only ever read from here.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Tuple

from compilation.models import CompileResult
from common.logging_utils import log_phase, Timer
from constants import Constants
from packer.errors import ArtifactError, MaterializationError
from packer.externals import get_external_modules
from packer.models import ArtifactPlan, PackConfig, ProjectManifest
from packer.versions import resolve_versions

logger = logging.getLogger(__name__)


def split_resolved_dependency(resolved: str) -> Tuple[str, str]:
    """Split `name@version` into its parts, keeping an npm scope on the name.

    `@scope/pkg@1.2.3` gives ("@scope/pkg", "1.2.3"); a bare name gives an
    empty version.
    """
    if resolved.startswith("@"):
        name, _, version = resolved[1:].partition("@")
        return f"@{name}", version
    name, _, version = resolved.partition("@")
    return name, version


def build_artifact_manifest(resolved: List[str]) -> Dict[str, Dict[str, str]]:
    """Build the package.json content for one artifact."""
    dependencies: Dict[str, str] = {}
    for entry in resolved:
        name, version = split_resolved_dependency(entry)
        previous = dependencies.get(name)
        if previous is not None and previous != version:
            logger.warning("Conflicting versions %s and %s for module %s, using %s", previous, version, name, version)
        dependencies[name] = version
    return {"dependencies": dependencies}


def plan_artifact(result: CompileResult, manifest: ProjectManifest, graph: Dict[str, Any]) -> ArtifactPlan:
    """Resolve one artifact's dependencies and its manifest."""
    resolved = resolve_versions(get_external_modules(result), manifest, graph)
    return ArtifactPlan(
        output_path=result.output_path,
        dependencies=resolved,
        manifest=build_artifact_manifest(resolved),
    )


@contextmanager
def _phase(output_path: str, phase: str) -> Iterator[None]:
    try:
        yield
    except Exception as exc:  # pylint: disable=broad-exception-caught
        raise ArtifactError(output_path, phase, str(exc)) from exc


def materialize_artifact(
    result: CompileResult,
    manifest: ProjectManifest,
    graph: Dict[str, Any],
    config: PackConfig,
    client,
) -> ArtifactPlan:
    """Write, copy and prune node_modules for one artifact.

    The artifact's dependencies are resolved again here so the step does not
    depend on state from other phases.

    Raises:
        ArtifactError: Naming the artifact and the failed phase.
    """
    module_path = result.output_path

    with _phase(module_path, "resolve"):
        plan = plan_artifact(result, manifest, graph)

    with _phase(module_path, "manifest"):
        os.makedirs(module_path, exist_ok=True)
        with open(os.path.join(module_path, Constants.PACKAGE_JSON_FILE), "w", encoding="utf-8") as file:
            json.dump(plan.manifest, file, indent=2)

    source = os.path.join(config.staging_dir, Constants.NODE_MODULES_DIR)
    if not os.path.isdir(source):
        logger.debug("No staged modules at %s, skipping copy and prune for %s", source, module_path)
        return plan

    with _phase(module_path, "copy"), Timer() as t:
        shutil.copytree(
            source,
            os.path.join(module_path, Constants.NODE_MODULES_DIR),
            symlinks=True,
            dirs_exist_ok=True,
        )
    log_phase(logger, config.verbose, "Copy modules: %s [%d ms]", module_path, t.duration_ms())

    with _phase(module_path, "prune"), Timer() as t:
        client.prune(module_path)
    log_phase(logger, config.verbose, "Prune: %s [%d ms]", module_path, t.duration_ms())

    return plan


def materialize_all(
    results: List[CompileResult],
    manifest: ProjectManifest,
    graph: Dict[str, Any],
    config: PackConfig,
    client,
) -> List[ArtifactPlan]:
    """Materialize every artifact with a bounded worker pool.

    Every artifact runs even when a sibling fails.

    Returns:
        Artifact plans in report order.

    Raises:
        MaterializationError: If any artifact failed.
    """
    plans: Dict[int, ArtifactPlan] = {}
    failures: List[ArtifactError] = []

    with ThreadPoolExecutor(max_workers=config.workers) as pool:
        futures = {
            pool.submit(materialize_artifact, result, manifest, graph, config, client): index
            for index, result in enumerate(results)
        }
        for future in as_completed(futures):
            try:
                plans[futures[future]] = future.result()
            except ArtifactError as e:
                logger.error("%s", e)
                failures.append(e)

    if failures:
        failures.sort(key=lambda f: f.output_path)
        raise MaterializationError(failures)
    return [plans[index] for index in sorted(plans)]

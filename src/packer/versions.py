"""Version resolution for external module references.

Direct dependencies take their range from the project's package.json;
transient ones take the concrete version installed beneath their origin in
the ``npm ls --depth=1`` snapshot. Development-only dependencies are never
shipped.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

import semantic_version

from packer.classifier import get_package_name
from packer.errors import ManifestError
from packer.models import ExternalRef, ProjectManifest

logger = logging.getLogger(__name__)


def load_project_manifest(path: str) -> ProjectManifest:
    """Load the project's package.json.

    Raises:
        ManifestError: If the file is missing, unreadable or not a JSON object.
    """
    try:
        with open(path, "r", encoding="utf-8") as file:
            data = json.load(file)
    except (OSError, ValueError) as e:
        raise ManifestError(f"Unable to load project manifest {path}: {e}") from e
    if not isinstance(data, dict):
        raise ManifestError(f"Project manifest {path} is not a JSON object")

    dependencies = data.get("dependencies")
    return ProjectManifest(
        path=path,
        dependencies=dict(dependencies) if isinstance(dependencies, dict) else {},
        dev_dependencies=dict(data.get("devDependencies") or {}),
    )


def lookup_transient_version(graph: Dict[str, Any], origin: Optional[str], external: str) -> Optional[str]:
    """Look up the version of external installed beneath origin in the snapshot."""
    if not origin:
        return None
    installed = graph.get("dependencies") or {}
    origin_info = installed.get(origin)
    if origin_info is None:
        # Deep imports such as `express/lib/router` resolve to their package
        origin_info = installed.get(get_package_name(origin))
    if not isinstance(origin_info, dict):
        return None
    dependency = (origin_info.get("dependencies") or {}).get(external)
    if not isinstance(dependency, dict):
        return None
    return dependency.get("version")


def resolve_versions(
    external_modules: Iterable[ExternalRef],
    manifest: ProjectManifest,
    graph: Dict[str, Any],
) -> List[str]:
    """Produce `name@version` (or bare `name`) entries for each external reference.

    Args:
        external_modules: External references of one artifact.
        manifest: The project's own manifest.
        graph: One-level dependency graph snapshot (`npm ls --json --depth=1`).

    Returns:
        Resolved dependency strings in reference order.
    """
    prod_modules: List[str] = []
    for ref in external_modules:
        version = manifest.dependencies.get(ref.external)
        if version:
            prod_modules.append(f"{ref.external}@{version}")
            continue
        if ref.external in manifest.dev_dependencies:
            continue

        version = lookup_transient_version(graph, ref.origin, ref.external)
        if not version:
            logger.warning("Could not determine version of module %s", ref.external)
            prod_modules.append(ref.external)
        else:
            prod_modules.append(f"{ref.external}@{version}")
    return prod_modules


def check_snapshot_consistency(manifest: ProjectManifest, graph: Dict[str, Any]) -> List[str]:
    """Warn about direct dependencies whose installed version misses the manifest range.

    Ranges that are not npm semver expressions (git URLs, tags, file paths)
    are skipped.

    Returns:
        Names of the mismatched dependencies.
    """
    mismatched: List[str] = []
    installed = graph.get("dependencies") or {}
    for name, wanted in (manifest.dependencies).items():
        info = installed.get(name)
        if not isinstance(info, dict) or not info.get("version"):
            continue
        try:
            spec = semantic_version.NpmSpec(wanted)
            version = semantic_version.Version(info["version"])
        except ValueError:
            continue
        if not spec.match(version):
            logger.warning(
                "Installed version %s of module %s does not satisfy %s declared in %s",
                info["version"],
                name,
                wanted,
                manifest.path,
            )
            mismatched.append(name)
    return mismatched

"""Classification of compiled modules as runtime-resolved externals."""

from __future__ import annotations

import re
from typing import Optional

from compilation.models import ModuleDescriptor
from constants import Constants
from packer.errors import ReportContractError

_EXTERNAL_PREFIX = "external "
# Optional externals type token (webpack 5: `external commonjs "lodash"`)
_EXTERNAL_RE = re.compile(r'^external (?:[A-Za-z0-9_-]+ )?"(.*)"$')


def is_builtin_module(name: str) -> bool:
    """Return True if name is a Node.js core module."""
    if name.startswith(Constants.NODE_BUILTIN_PREFIX):
        return True
    return name in Constants.NODE_BUILTIN_MODULES


def get_package_name(request: str) -> str:
    """Return the package part of a module request, keeping any npm scope."""
    components = request.split("/")
    main = components[0]
    if main.startswith("@") and len(components) > 1:
        return f"{main}/{components[1]}"
    return main


def get_external_module_name(module: ModuleDescriptor) -> str:
    """Extract the package name from an external module identifier.

    Scoped packages keep their scope (`@scope/pkg/sub` -> `@scope/pkg`).

    Raises:
        ReportContractError: If the identifier does not carry a quoted request.
    """
    match = _EXTERNAL_RE.match(module.identifier)
    if match is None:
        raise ReportContractError(f"Malformed external module identifier: {module.identifier!r}")
    return get_package_name(match.group(1))


def classify_module(module: ModuleDescriptor) -> Optional[str]:
    """Return the external package name for module, or None if it is bundled or built-in."""
    if not module.identifier.startswith(_EXTERNAL_PREFIX):
        return None
    name = get_external_module_name(module)
    if is_builtin_module(name):
        return None
    return name


def is_external_module(module: ModuleDescriptor) -> bool:
    """Return True if module is left to be resolved from node_modules at runtime."""
    return classify_module(module) is not None

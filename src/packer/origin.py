"""Origin tracing along a module's issuer chain."""

from __future__ import annotations

from typing import Optional

from compilation.models import ModuleDescriptor
from packer.errors import ReportContractError

_RELATIVE_PREFIX = "./"


def find_external_origin(issuer: Optional[ModuleDescriptor]) -> Optional[ModuleDescriptor]:
    """Find the module that pulled an external dependency in.

    Walks back over same-directory relative imports and returns the first
    issuer whose raw request is not relative, or None when the chain ends.

    Raises:
        ReportContractError: If the issuer chain loops back on itself.
    """
    seen = set()
    while issuer is not None and (issuer.raw_request or "").startswith(_RELATIVE_PREFIX):
        if id(issuer) in seen:
            raise ReportContractError(f"Cyclic issuer chain at module {issuer.identifier!r}")
        seen.add(id(issuer))
        issuer = issuer.issuer
    return issuer

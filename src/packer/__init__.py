"""External module packing.

- classifier.py: external/built-in classification of compiled modules
- origin.py: issuer chain walk to the importing first-party module
- externals.py: per-artifact (origin, external) set extraction
- versions.py: version pins from package.json and the npm ls snapshot
- composite.py: single shared install of all artifacts' dependencies
- materialize.py: per-artifact package.json, copy and prune
- pipeline.py: the phases wired together
"""

from .pipeline import pack_external_modules

__all__ = ["pack_external_modules"]

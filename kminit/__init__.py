"""kminit: trusted acquisition of node-operator images, binaries and tooling.

- Concurrent latest-release resolution across repositories
- Base image signature gate before any pull
- Checksum-pinned install of the cosign verifier per CPU architecture
- Detached-signature gate before the tooling bundle is executed
"""

__version__ = "0.1.0"
__description__ = "Trusted artifact acquisition pipeline for node operators"

from kminit.core.orchestrator import Orchestrator
from kminit.cli.app import app as cli

__all__ = ["Orchestrator", "cli", "__version__"]

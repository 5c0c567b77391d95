"""toolstream: simplestreams discovery metadata for tools tarballs.

Discovers tools in an environment's storage, optionally fetches each to
record its size and SHA-256, and publishes a simplestreams index/products
pair either to the environment's storage or to a local directory.
"""

__version__ = "0.1.0"
__description__ = "Generate and publish simplestreams tools metadata"

from toolstream.core.orchestrator import Orchestrator
from toolstream.cli.app import app as cli

__all__ = ["Orchestrator", "cli", "__version__"]

"""
constellations - Dependency graph engine for mathematical artifacts

Constellations ingests theorems, lemmas, definitions and proofs extracted
from a document, canonicalizes their dependency edges, and derives reading
order, bounded-depth proof paths, distilled proof documents and a live
replay of the document in reading order.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("constellations")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed
__license__ = "MIT"

from constellations.session import GraphSession

__all__ = [
    "__version__",
    "GraphSession",
]

"""HTML Generation module for distilled proofs.

This module renders distillation models as standalone HTML documents.
"""

from constellations.html.generator import DistillHTMLGenerator

__all__ = ["DistillHTMLGenerator"]

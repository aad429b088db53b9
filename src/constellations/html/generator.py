"""HTML Generator for distilled proofs.

This module renders a DistillModel into a standalone HTML page. Uses
Jinja2 templates; the artifact color legend matches the graph palette.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping

from constellations import __version__

if TYPE_CHECKING:
    from constellations.graph.distill import DistillEntry, DistillModel


@dataclass
class ArtifactCard:
    """One rendered artifact section."""

    id: str
    kind: str
    title: str
    color: str
    location: str | None
    distance: int
    used_by: list[str]
    content: str
    proof: str | None
    is_target: bool


class DistillHTMLGenerator:
    """Generates an HTML view of a distilled proof.

    Args:
        model: The distillation to render.
        node_colors: Node type -> color, usually ProcessedGraph.node_colors.
        version: Version string for display (defaults to the package version).
    """

    def __init__(
        self,
        model: DistillModel,
        node_colors: Mapping[str, str] | None = None,
        version: str | None = None,
    ) -> None:
        self.model = model
        self.node_colors = dict(node_colors or {})
        self.version = version if version is not None else __version__

    def generate(self) -> str:
        """Generate the complete HTML document.

        Returns:
            Complete HTML document as string.
        """
        try:
            from jinja2 import Environment, PackageLoader, select_autoescape

            env = Environment(
                loader=PackageLoader("constellations.html", "templates"),
                autoescape=select_autoescape(["html", "xml", "html.j2"]),
            )
            template = env.get_template("distill.html.j2")
        except ImportError:
            raise ImportError(
                "DistillHTMLGenerator requires the html extra. "
                "Install with: pip install constellations[html]"
            )

        cards = [self._card(entry, is_target=(i == 0)) for i, entry in enumerate(self.model.entries)]
        return template.render(
            title=self.model.target.node.get_label(),
            cards=cards,
            definitions=self.model.definitions,
            depth=self.model.depth,
            max_depth=self.model.max_depth,
            version=self.version,
        )

    def _card(self, entry: DistillEntry, is_target: bool) -> ArtifactCard:
        node = entry.node
        location = None
        if node.position is not None and node.position.line_start is not None:
            location = str(node.position)
        return ArtifactCard(
            id=node.id,
            kind=node.type.replace("_", " ").title(),
            title=node.get_label(),
            color=self.node_colors.get(node.type, "#999999"),
            location=location,
            distance=entry.distance,
            used_by=entry.used_by,
            content=(node.content or node.content_preview or "").strip(),
            proof=node.proof.strip() if node.proof else None,
            is_target=is_target,
        )

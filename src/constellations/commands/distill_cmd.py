"""
constellations.commands.distill_cmd - Distill a proof into one document.
"""

from __future__ import annotations

import argparse
import json

from constellations.commands.common import load_session, write_output
from constellations.commands.proof_cmd import unfold_to
from constellations.graph.serialize import distill_to_markdown, serialize_distill_model


def run(args: argparse.Namespace) -> int:
    """Render the distilled proof of args.target as markdown, HTML or JSON."""
    if args.depth < 1:
        raise ValueError("--depth must be at least 1")

    session = load_session(args)
    unfold_to(session, args.target, args.depth)
    model = session.build_distill_model()

    if args.format == "html":
        from constellations.html import DistillHTMLGenerator

        text = DistillHTMLGenerator(model, node_colors=session.graph.node_colors).generate()
    elif args.format == "json":
        text = json.dumps(serialize_distill_model(model), indent=2)
    else:
        text = distill_to_markdown(model)

    write_output(text, args.output, quiet=args.quiet)
    return 0

"""
constellations.commands.common - Shared helpers for command handlers.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

from constellations.config import get_config
from constellations.graph.factory import build_session, load_export
from constellations.session import GraphSession


def resolve_config(args: argparse.Namespace) -> dict[str, Any]:
    """Return the configuration resolved by main(), or resolve it now."""
    config = getattr(args, "app_config", None)
    if config is None:
        config = get_config(getattr(args, "config", None))
        args.app_config = config
    return config


def load_session(args: argparse.Namespace) -> GraphSession:
    """Load ``args.export`` into a fresh session."""
    export = load_export(Path(args.export))
    return build_session(export, resolve_config(args))


def write_output(text: str, output: Path | None, quiet: bool = False) -> None:
    """Write text to a file, or to stdout when no path is given."""
    if output is None:
        print(text)
        return
    output.write_text(text, encoding="utf-8")
    if not quiet:
        print(f"Wrote {output}")

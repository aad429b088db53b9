"""
constellations.cli - Command-line interface.

Main entry point for the constellations CLI tool.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from constellations import __version__
from constellations.commands import distill_cmd, info, order, proof_cmd, replay_cmd
from constellations.config import get_config


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="constellations",
        description="Dependency graph engine for mathematical artifacts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  constellations info paper.json                   # Counts, types and colors
  constellations order paper.json                  # Reading order
  constellations proof paper.json thm-3 --depth 2  # Prerequisites two layers deep
  constellations distill paper.json thm-3 --format html --output thm-3.html
  constellations replay paper.json --interval-ms 300

Configuration:
  .constellations.toml is looked up from the current directory upwards.
  CONSTELLATIONS_<SECTION>_<KEY> environment variables override it,
  e.g. CONSTELLATIONS_REPLAY_INTERVAL_MS=500.

For detailed command help: constellations <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"constellations {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output (debug logging, tracebacks on error)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # info command
    info_parser = subparsers.add_parser(
        "info",
        help="Summarize an exported graph",
    )
    info_parser.add_argument("export", type=Path, help="Graph export (JSON)")
    info_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output the summary as JSON",
    )

    # order command
    order_parser = subparsers.add_parser(
        "order",
        help="Print nodes in reading order",
    )
    order_parser.add_argument("export", type=Path, help="Graph export (JSON)")
    order_parser.add_argument(
        "--format",
        choices=["text", "csv", "json"],
        default="text",
        help="Output format (default: text)",
    )

    # proof command
    proof_parser = subparsers.add_parser(
        "proof",
        help="Show the prerequisite subgraph of an artifact",
    )
    proof_parser.add_argument("export", type=Path, help="Graph export (JSON)")
    proof_parser.add_argument("target", help="Id of the artifact to prove")
    proof_parser.add_argument(
        "--depth",
        type=int,
        default=1,
        help="Prerequisite layers to unfold (default: 1)",
        metavar="N",
    )
    proof_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output the subgraph as JSON",
    )

    # distill command
    distill_parser = subparsers.add_parser(
        "distill",
        help="Flatten a proof into one linear document",
    )
    distill_parser.add_argument("export", type=Path, help="Graph export (JSON)")
    distill_parser.add_argument("target", help="Id of the artifact to prove")
    distill_parser.add_argument(
        "--depth",
        type=int,
        default=1,
        help="Prerequisite layers to include (default: 1)",
        metavar="N",
    )
    distill_parser.add_argument(
        "--format",
        choices=["markdown", "html", "json"],
        default="markdown",
        help="Output format; html requires the html extra (default: markdown)",
    )
    distill_parser.add_argument(
        "--output",
        type=Path,
        help="Output file path (default: stdout)",
        metavar="PATH",
    )

    # replay command
    replay_parser = subparsers.add_parser(
        "replay",
        help="Reveal nodes one at a time in reading order",
    )
    replay_parser.add_argument("export", type=Path, help="Graph export (JSON)")
    replay_parser.add_argument(
        "--interval-ms",
        type=int,
        help="Milliseconds between reveals (clamped to the configured range)",
        metavar="MS",
    )
    replay_parser.add_argument(
        "--instant",
        action="store_true",
        help="Reveal everything without waiting",
    )

    # version command
    subparsers.add_parser(
        "version",
        help="Show version information",
    )

    return parser


def configure_logging(args: argparse.Namespace, config: Optional[dict] = None) -> None:
    """Configure the root logger from -v/-q and the [logging] config section."""
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        name = str((config or {}).get("logging", {}).get("level", "WARNING")).upper()
        level = getattr(logging, name, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()

    # Enable shell tab-completion if argcomplete is installed
    # Install with: pip install constellations[completion]
    # Then activate: eval "$(register-python-argcomplete constellations)"
    try:
        import argcomplete

        argcomplete.autocomplete(parser)
    except ImportError:
        pass

    args = parser.parse_args(argv)

    # Handle no command
    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == "version":
            return version_command(args)

        configure_logging(args)
        args.app_config = get_config(args.config)
        configure_logging(args, args.app_config)

        # Dispatch to command handlers
        if args.command == "info":
            return info.run(args)
        elif args.command == "order":
            return order.run(args)
        elif args.command == "proof":
            return proof_cmd.run(args)
        elif args.command == "distill":
            return distill_cmd.run(args)
        elif args.command == "replay":
            return replay_cmd.run(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


def version_command(args: argparse.Namespace) -> int:
    """Handle version command."""
    print(f"constellations {__version__}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

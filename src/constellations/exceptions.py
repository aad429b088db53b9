"""Exceptions raised by the constellations shell.

The graph core never raises on malformed input; these cover the
surrounding loader, configuration and misuse of proof-mode operations.
"""


class ConstellationsError(Exception):
    """Base exception for constellations."""


class ExportLoadError(ConstellationsError):
    """Raised when an exported graph document cannot be loaded."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot load graph export {source}: {reason}")


class ConfigError(ConstellationsError):
    """Raised when configuration cannot be parsed or is invalid."""


class ProofModeError(ConstellationsError):
    """Raised when an operation requires an active proof mode."""

"""
constellations.commands - CLI command implementations
"""

__all__ = [
    "distill_cmd",
    "info",
    "order",
    "proof_cmd",
    "replay_cmd",
]

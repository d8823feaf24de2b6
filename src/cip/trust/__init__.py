"""Trust scoring."""

from cip.trust.scorer import score_consistency, with_network_flags

__all__ = ["score_consistency", "with_network_flags"]

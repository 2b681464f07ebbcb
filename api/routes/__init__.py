"""API routes package"""

from . import foods, entries, summaries, bundles, health

__all__ = ["foods", "entries", "summaries", "bundles", "health"]

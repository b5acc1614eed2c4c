"""In-memory transaction stores."""

from atm_recon.store.stacks import ChronologicalStacks

__all__ = ["ChronologicalStacks"]

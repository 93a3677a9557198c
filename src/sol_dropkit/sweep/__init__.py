"""Balance sweeping into the collection wallet."""

from sol_dropkit.sweep.drainer import Drainer

__all__ = ["Drainer"]

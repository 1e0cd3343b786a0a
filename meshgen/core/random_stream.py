"""
Deterministic random stream for tree growth.

Every random decision during growth is one draw of a float in [0, 1) from
a RandomStream, mapped onto the wanted range by linear interpolation. The
stream is created per build and passed explicitly to every call that
draws from it; there is no module-level generator.
"""

from typing import Any, Dict, Optional
import math
import numpy as np


class RandomStream:
    """
    Seeded source of floats in [0, 1), consumed in a strict order.

    Wraps numpy's PCG64 generator, whose output for a given seed is stable
    across platforms.

    Parameters
    ----------
    seed : int, optional
        Seed for the underlying generator
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.rng = np.random.default_rng(seed)
        self.draw_count = 0

    def value(self) -> float:
        """Next float in [0, 1)."""
        self.draw_count += 1
        return float(self.rng.random())

    def range_float(self, a: float, b: float) -> float:
        """Float interpolated between a and b by one draw."""
        v = self.value()
        return a + (b - a) * v

    def range_int(self, a: int, b: int) -> int:
        """Integer floor(lerp(a, b, v)): in [a, b) for a < b, and a when a == b."""
        v = self.value()
        return int(math.floor(a + (b - a) * v))

    def get_state(self) -> Dict[str, Any]:
        """Get generator state for reproducibility."""
        return {
            "seed": self.seed,
            "draw_count": self.draw_count,
            "bit_generator": self.rng.bit_generator.state,
        }

    def set_state(self, state: Dict[str, Any]) -> None:
        """Restore generator state."""
        self.seed = state.get("seed")
        self.draw_count = state.get("draw_count", 0)
        self.rng.bit_generator.state = state["bit_generator"]


__all__ = ["RandomStream"]

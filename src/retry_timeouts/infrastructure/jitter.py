"""Symmetric multiplicative jitter"""

import math
import random
from typing import Optional


class Jitter:
    """Randomize durations to desynchronize concurrent retriers

    Uses the process-wide ``random`` generator unless a seeded
    ``random.Random`` is injected, which makes results reproducible.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        """Initialize jitter applicator

        Args:
            rng: Random source (defaults to the module-level generator)
        """
        self.rng = rng

    def apply(self, quantity: float, factor: float) -> float:
        """Apply +/-factor jitter to a quantity

        Args:
            quantity: Duration to randomize
            factor: Jitter fraction (0.0-0.5)

        Returns:
            Value uniformly distributed in [quantity*(1-factor), quantity*(1+factor)],
            or quantity unchanged if it is not positive, is infinite or factor is zero
        """
        if quantity <= 0 or not factor or math.isinf(quantity):
            return quantity

        low = quantity * (1 - factor)
        high = quantity * (1 + factor)
        sample = self.rng.random() if self.rng is not None else random.random()
        return low + (high - low) * sample

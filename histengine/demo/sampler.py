from __future__ import annotations

from typing import Optional

import numpy as np


class GaussianSampler:
    """
    Seeded source of normal samples for demo data.

    Each instance owns its generator; pass the sampler to whatever needs
    random data instead of seeding a global RNG.
    """

    def __init__(self, seed: Optional[int] = 0) -> None:
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def randn(self, n: int, mean: float = 0.0, stddev: float = 1.0) -> np.ndarray:
        if n < 0:
            raise ValueError(f"sample size must be non-negative, got {n}")
        if stddev < 0:
            raise ValueError(f"stddev must be non-negative, got {stddev}")
        return mean + stddev * self._rng.standard_normal(int(n))


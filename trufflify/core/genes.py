from __future__ import annotations
import numpy as np
from dataclasses import dataclass
from typing import Optional, Tuple

from trufflify.config import EvolutionConfig


@dataclass(frozen=True)
class Gene:
    """A translucent disc proposed as one mutation."""
    x: int
    y: int
    radius: int
    color: Tuple[int, int, int]
    alpha: int = 100

    def __post_init__(self):
        if self.radius < 1:
            raise ValueError(f"radius must be >= 1, got {self.radius}")
        if len(self.color) != 3 or not all(0 <= c <= 255 for c in self.color):
            raise ValueError(f"color must be three values in [0, 255], got {self.color}")
        if not 0 <= self.alpha <= 255:
            raise ValueError(f"alpha must be in [0, 255], got {self.alpha}")

    def region(self, width: int, height: int) -> Tuple[int, int, int, int]:
        """
        Bounding square [x-r, x+r) x [y-r, y+r) clipped to the buffer,
        as (x0, x1, y0, y1).
        """
        x0 = max(0, self.x - self.radius)
        x1 = min(width, self.x + self.radius)
        y0 = max(0, self.y - self.radius)
        y1 = min(height, self.y + self.radius)
        return x0, x1, y0, y1

    def covers(self, x: int, y: int) -> bool:
        dx = x - self.x
        dy = y - self.y
        return dx * dx + dy * dy <= self.radius * self.radius


class GeneSampler:
    """
    Draws genes uniformly over a width x height buffer.

    The generator is created once and never reseeded; seed=None pulls
    fresh OS entropy.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        config: Optional[EvolutionConfig] = None,
    ):
        if width <= 0 or height <= 0:
            raise ValueError(f"cannot sample genes on a {width}x{height} buffer")
        self.width = width
        self.height = height
        self.config = config or EvolutionConfig()
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def sample(self) -> Gene:
        rng = self.rng
        x = int(rng.integers(0, self.width))
        y = int(rng.integers(0, self.height))
        radius = int(rng.integers(self.config.min_radius, self.config.max_radius + 1))
        r, g, b = (int(c) for c in rng.integers(0, 256, size=3))
        return Gene(x, y, radius, (r, g, b), self.config.gene_alpha)

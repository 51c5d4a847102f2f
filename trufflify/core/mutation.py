"""
mutation.py

Hill-climbing core for Trufflify.

Each trial paints one translucent disc (a Gene) onto the current buffer,
compares the squared RGB error of the touched pixels against the target
before and after, and keeps the paint only if the error strictly dropped.
Otherwise the touched pixels are restored from a per-trial rollback log.

Acceptance looks at the touched region only, never at the whole image.
Because untouched pixels do not change, the whole-image error can still
only go down or stay the same.
"""

from __future__ import annotations
import numpy as np
from dataclasses import dataclass
from typing import Optional, Tuple
from numba import njit

from trufflify.config import EvolutionConfig
from .buffer import PixelBuffer
from .genes import Gene, GeneSampler
from . import distance


def blend(current, color, alpha: int) -> Tuple[int, int, int, int]:
    """
    Paint `color` over `current` with weight alpha/255.
    Integer arithmetic, truncating; result is opaque.
    """
    inv = 255 - alpha
    return (
        (alpha * int(color[0]) + inv * int(current[0])) // 255,
        (alpha * int(color[1]) + inv * int(current[1])) // 255,
        (alpha * int(color[2]) + inv * int(current[2])) // 255,
        255,
    )


@njit
def _trial_kernel(current, target, cx, cy, radius, color, alpha, x0, x1, y0, y1):
    """
    Blend one disc into `current` in place and score it.

    Returns (error_before, error_after, touched). If the error did not
    strictly drop the touched pixels are already restored on return.
    """
    n = (x1 - x0) * (y1 - y0)
    if n < 0:
        n = 0
    # rollback log: coordinates and prior RGBA of every touched pixel
    coords = np.empty((n, 2), dtype=np.int64)
    backup = np.empty((n, 4), dtype=np.uint8)

    r2 = radius * radius
    inv = 255 - alpha
    before = np.int64(0)
    after = np.int64(0)
    touched = 0

    for y in range(y0, y1):
        dy = y - cy
        for x in range(x0, x1):
            dx = x - cx
            if dx * dx + dy * dy > r2:
                continue
            coords[touched, 0] = y
            coords[touched, 1] = x
            for ch in range(4):
                backup[touched, ch] = current[y, x, ch]
            for ch in range(3):
                c = np.int64(current[y, x, ch])
                t = np.int64(target[y, x, ch])
                d = c - t
                before += d * d
                b = (alpha * np.int64(color[ch]) + inv * c) // 255
                current[y, x, ch] = np.uint8(b)
                d = b - t
                after += d * d
            current[y, x, 3] = np.uint8(255)
            touched += 1

    if after >= before:
        for i in range(touched):
            y = coords[i, 0]
            x = coords[i, 1]
            for ch in range(4):
                current[y, x, ch] = backup[i, ch]

    return before, after, touched


@dataclass(frozen=True)
class TrialResult:
    gene: Gene
    region: Tuple[int, int, int, int]   # (x0, x1, y0, y1)
    touched: int
    error_before: int
    error_after: int
    accepted: bool


class MutationEngine:
    """
    Owns the target and current buffers and evolves current toward target.

    Trials run strictly one after another on the shared current buffer.
    The engine is not safe to call from several threads at once.
    """

    def __init__(
        self,
        target: PixelBuffer,
        current: PixelBuffer,
        *,
        seed: Optional[int] = None,
        sampler: Optional[GeneSampler] = None,
        config: Optional[EvolutionConfig] = None,
    ):
        if target.size != current.size:
            raise ValueError(
                f"current {current.width}x{current.height} does not match "
                f"target {target.width}x{target.height}"
            )
        self.config = config or EvolutionConfig()
        self.target = target
        self.current = current
        self.sampler = sampler or GeneSampler(
            target.width, target.height, seed=seed, config=self.config
        )
        self.trials = 0
        self.accepted = 0

    @property
    def width(self) -> int:
        return self.target.width

    @property
    def height(self) -> int:
        return self.target.height

    def run_trial(self, gene: Gene) -> TrialResult:
        region = gene.region(self.width, self.height)
        x0, x1, y0, y1 = region
        color = np.asarray(gene.color, dtype=np.int64)
        before, after, touched = _trial_kernel(
            self.current.pixels, self.target.pixels,
            gene.x, gene.y, gene.radius, color, gene.alpha,
            x0, x1, y0, y1,
        )
        accepted = bool(after < before)
        self.trials += 1
        if accepted:
            self.accepted += 1
        return TrialResult(gene, region, int(touched), int(before), int(after), accepted)

    def evolve(self, iterations: int) -> None:
        """Run exactly `iterations` trials with freshly sampled genes."""
        if iterations < 1:
            raise ValueError(f"iterations must be positive, got {iterations}")
        for _ in range(iterations):
            self.run_trial(self.sampler.sample())

    def error(self) -> int:
        return distance.total_error(self.current.pixels, self.target.pixels)

    def perceptual_error(self) -> float:
        return distance.perceptual_error(self.current.pixels, self.target.pixels)

    def view(self) -> np.ndarray:
        return self.current.view()

    def snapshot(self) -> np.ndarray:
        return self.current.snapshot()

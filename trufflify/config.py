"""
Configuration dataclass for a Trufflify run.

Holds the knobs shared by the engine, the frame driver and the hosts:
- mutation shape (radius range, gene translucency)
- frame pacing (trials per frame, checkpoint cadence)
- file names and display size
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Tuple


@dataclass
class EvolutionConfig:
    # Mutation proposals
    min_radius: int = 2
    max_radius: int = 30               # inclusive
    gene_alpha: int = 100              # out of 255

    # Frame loop
    iterations_per_frame: int = 200
    checkpoint_every_frames: int = 50

    # Files
    target_path: str = "truffle.png"
    output_name: str = "trufflified.png"
    checkpoint_name: str = "checkpoint.npz"

    # Display
    display_min_side: int = 600
    background: Tuple[int, int, int] = (30, 30, 30)

    def __post_init__(self):
        if self.min_radius < 1 or self.max_radius < self.min_radius:
            raise ValueError(
                f"invalid radius range [{self.min_radius}, {self.max_radius}]"
            )
        if not 0 <= self.gene_alpha <= 255:
            raise ValueError(f"gene_alpha must be in [0, 255], got {self.gene_alpha}")
        if self.iterations_per_frame < 1:
            raise ValueError("iterations_per_frame must be positive")
        if self.checkpoint_every_frames < 1:
            raise ValueError("checkpoint_every_frames must be positive")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

from __future__ import annotations
import itertools
import os
import time
from typing import Optional, Dict, Callable
import numpy as np
from tqdm import tqdm

from .mutation import MutationEngine
from .utils import save_checkpoint

FrameCallback = Optional[Callable[[np.ndarray, int], None]]


def run_evolution(
    engine: MutationEngine,
    frames: Optional[int] = 300,
    *,
    iterations_per_frame: Optional[int] = None,
    frame_callback: FrameCallback = None,
    frame_interval: int = 1,
    first_frame: int = 0,
    checkpoint_path: Optional[str] = None,
    checkpoint_every: Optional[int] = None,
    verbose: bool = True,
) -> Dict:
    """
    Drive the engine frame by frame: one evolve() call, then one display.

    frames=None runs until KeyboardInterrupt, which ends the loop cleanly
    between frames. The frame callback receives a read-only view of the
    current buffer and a running frame index. first_frame offsets the frame
    number stored in checkpoints when continuing a resumed run.
    """
    cfg = engine.config
    if iterations_per_frame is None:
        iterations_per_frame = cfg.iterations_per_frame
    if checkpoint_every is None:
        checkpoint_every = cfg.checkpoint_every_frames
    frame_interval = max(1, frame_interval)

    stats = {
        "start_time": time.time(),
        "initial_error": engine.error(),
        "trials": 0,
        "accepted": 0,
        "frames": 0,
        "frames_emitted": 0,
        "interrupted": False,
    }
    trials_at_start = engine.trials
    accepted_at_start = engine.accepted
    frame_idx = 0

    frame_iter = range(frames) if frames is not None else itertools.count()
    bar = tqdm(frame_iter, total=frames, desc="frames", disable=not verbose)

    def _checkpoint(frame: int):
        save_checkpoint(
            checkpoint_path,
            engine.snapshot(),
            frame=first_frame + frame,
            trials=engine.trials,
            accepted=engine.accepted,
        )

    try:
        for frame in bar:
            accepted_before = engine.accepted
            engine.evolve(iterations_per_frame)
            stats["frames"] += 1

            last = frames is not None and frame == frames - 1
            if frame_callback is not None and (frame % frame_interval == 0 or last):
                frame_callback(engine.view(), frame_idx)
                stats["frames_emitted"] += 1
                frame_idx += 1

            if checkpoint_path is not None and ((frame + 1) % checkpoint_every == 0 or last):
                _checkpoint(frame)

            if verbose:
                bar.set_postfix({"accepted": engine.accepted - accepted_before})
    except KeyboardInterrupt:
        if frames is not None:
            raise
        stats["interrupted"] = True
        if checkpoint_path is not None:
            _checkpoint(stats["frames"] - 1)
    finally:
        bar.close()

    stats["trials"] = engine.trials - trials_at_start
    stats["accepted"] = engine.accepted - accepted_at_start
    stats["final_error"] = engine.error()
    stats["end_time"] = time.time()
    stats["duration_s"] = stats["end_time"] - stats["start_time"]
    return stats


def default_checkpoint_path(out_dir: str, engine: MutationEngine) -> str:
    return os.path.join(out_dir, engine.config.checkpoint_name)

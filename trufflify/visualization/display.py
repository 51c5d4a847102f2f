from __future__ import annotations
import os
from typing import List, Optional, Tuple
from PIL import Image
import numpy as np
import imageio


def render_buffer(
    view: np.ndarray,
    min_side: int = 600,
    background: Tuple[int, int, int] = (30, 30, 30),
) -> Image.Image:
    """
    Turn an RGBA buffer view into an RGB image ready to show.

    Transparent areas show the background; images narrower than min_side
    are scaled up (nearest neighbour) so the width reaches min_side.
    """
    arr = np.asarray(view, dtype=np.uint8)
    if arr.ndim != 3 or arr.shape[2] != 4:
        raise ValueError("view must be an HxWx4 RGBA array")

    h, w = arr.shape[0], arr.shape[1]
    fg = Image.fromarray(np.ascontiguousarray(arr))
    bg = Image.new("RGBA", (w, h), (*background, 255))
    img = Image.alpha_composite(bg, fg).convert("RGB")

    if w < min_side:
        scale = min_side / float(w)
        img = img.resize((int(round(w * scale)), int(round(h * scale))), Image.NEAREST)
    return img


class FrameCollector:

    def __init__(
        self,
        out_dir: Optional[str] = None,
        keep_frames: bool = True,
        png_prefix: str = "frame",
        min_side: int = 0,
        background: Tuple[int, int, int] = (30, 30, 30),
    ):
        self.out_dir = out_dir
        self.keep_frames = keep_frames
        self.png_prefix = png_prefix
        self.min_side = min_side
        self.background = background
        self.frames: List[np.ndarray] = []
        if self.out_dir is not None:
            os.makedirs(self.out_dir, exist_ok=True)

    def callback(self, view: np.ndarray, frame_idx: int):
        img = render_buffer(view, min_side=self.min_side, background=self.background)

        if self.keep_frames:
            self.frames.append(np.asarray(img))

        if self.out_dir is not None:
            path = os.path.join(self.out_dir, f"{self.png_prefix}_{frame_idx:04d}.png")
            img.save(path)

    def save_gif(self, out_path: str, fps: int = 12, loop: int = 0):
        if len(self.frames) == 0:
            raise RuntimeError("No frames to save. Did you collect frames?")
        save_frames_as_gif(self.frames, out_path, fps=fps, loop=loop)


def save_frames_as_gif(frames: List[np.ndarray], out_path: str, fps: int = 12, loop: int = 0):
    # pillow-backed GIF writer takes the per-frame duration in milliseconds
    duration = int(1000 / fps)
    imageio.mimsave(out_path, frames, duration=duration, loop=loop)

from __future__ import annotations
import numpy as np
from typing import Tuple

Color = Tuple[int, int, int, int]

# Pixels never written by the input image keep this value.
TRANSPARENT: Color = (0, 0, 0, 0)


class PixelBuffer:
    """
    Fixed-size RGBA8 image stored as a (height, width, 4) uint8 array.

    Pixels are addressed as (x, y). The size is fixed at construction;
    zero-sized buffers are rejected because nothing can be sampled on them.
    """

    def __init__(self, width: int, height: int, fill: Color = TRANSPARENT):
        if width <= 0 or height <= 0:
            raise ValueError(f"buffer dimensions must be positive, got {width}x{height}")
        self._pixels = np.empty((height, width, 4), dtype=np.uint8)
        self._pixels[:] = np.asarray(fill, dtype=np.uint8)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Build a buffer from an HxWx3 or HxWx4 array. RGB input gets alpha 255."""
        arr = np.asarray(array)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise ValueError("Unsupported image array shape; expected HxWx3 or HxWx4.")
        h, w = arr.shape[0], arr.shape[1]
        buf = cls(w, h)
        buf._pixels[..., :3] = arr[..., :3]
        buf._pixels[..., 3] = arr[..., 3] if arr.shape[2] == 4 else 255
        return buf

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def pixels(self) -> np.ndarray:
        # writable backing array; only the owning engine should hold on to it
        return self._pixels

    def get_pixel(self, x: int, y: int) -> Color:
        r, g, b, a = self._pixels[y, x]
        return (int(r), int(g), int(b), int(a))

    def set_pixel(self, x: int, y: int, color) -> None:
        if len(color) == 3:
            color = (*color, 255)
        self._pixels[y, x] = color

    def view(self) -> np.ndarray:
        v = self._pixels.view()
        v.flags.writeable = False
        return v

    def snapshot(self) -> np.ndarray:
        return self._pixels.copy()

    def cropped(self, width: int, height: int) -> "PixelBuffer":
        """
        Copy of this buffer clipped or padded to width x height.

        The top-left overlap is copied; anything outside it stays TRANSPARENT.
        Content is never rescaled.
        """
        out = PixelBuffer(width, height)
        w = min(width, self.width)
        h = min(height, self.height)
        out._pixels[:h, :w] = self._pixels[:h, :w]
        return out

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"

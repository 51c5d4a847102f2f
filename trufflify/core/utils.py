import os
from typing import Dict, Tuple
from PIL import Image, UnidentifiedImageError
import numpy as np

from .buffer import PixelBuffer


class ImageLoadError(OSError):
    """An input or target image is missing or cannot be decoded."""


def load_image(path: str) -> np.ndarray:
    if not os.path.isfile(path):
        raise ImageLoadError(f"no file at {path}")
    try:
        with Image.open(path) as img:
            return np.asarray(img.convert("RGBA"), dtype=np.uint8)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise ImageLoadError(f"cannot decode {path}: {exc}") from exc


def load_pair(input_path: str, target_path: str) -> Tuple[PixelBuffer, PixelBuffer]:
    """
    Load (current, target). The target fixes the size; the input is cropped
    or padded with transparent pixels to match, never rescaled.
    """
    try:
        target = PixelBuffer.from_array(load_image(target_path))
    except ImageLoadError as exc:
        raise ImageLoadError(f"target image not found or unreadable: {exc}") from exc
    try:
        source = PixelBuffer.from_array(load_image(input_path))
    except ImageLoadError as exc:
        raise ImageLoadError(f"input image not found or unreadable: {exc}") from exc
    current = source.cropped(target.width, target.height)
    return current, target


def save_image(array: np.ndarray, path: str):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    Image.fromarray(np.asarray(array, dtype=np.uint8)).save(path)


def save_checkpoint(path: str, array: np.ndarray, **meta):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    np.savez_compressed(path, current=array, **meta)


def load_checkpoint(path: str, width: int, height: int) -> np.ndarray:
    """Read the buffer saved by save_checkpoint; its size must be width x height."""
    with np.load(path) as data:
        arr = data["current"]
    if arr.shape != (height, width, 4):
        raise ValueError(
            f"checkpoint {path} holds a {arr.shape} buffer, expected {(height, width, 4)}"
        )
    return arr.astype(np.uint8)


def checkpoint_meta(path: str) -> Dict[str, int]:
    """Counters saved next to the buffer: frame, trials, accepted."""
    with np.load(path) as data:
        return {key: int(data[key]) for key in ("frame", "trials", "accepted") if key in data.files}

import numpy as np
from skimage.color import rgb2lab, deltaE_ciede2000


# color space util
def rgb_to_lab(image: np.ndarray) -> np.ndarray:
    """
    Convert an RGB(A) image [0-255] to CIE Lab. Alpha is dropped.
    """
    img = np.asarray(image)[..., :3].astype(np.float32) / 255.0
    return rgb2lab(img)


# color dist metrics
def color_diff(c1, c2) -> int:
    """
    Squared Euclidean distance in RGB space. Alpha is ignored.
    """
    dr = int(c1[0]) - int(c2[0])
    dg = int(c1[1]) - int(c2[1])
    db = int(c1[2]) - int(c2[2])
    return dr * dr + dg * dg + db * db


# vector version
def batch_color_diff(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Per-pixel color_diff for two arrays of the same shape (..., C), C >= 3.
    Returns int64 array of shape (...).
    """
    diff = np.asarray(a)[..., :3].astype(np.int64) - np.asarray(b)[..., :3].astype(np.int64)
    return np.sum(diff * diff, axis=-1)


def total_error(current: np.ndarray, target: np.ndarray) -> int:
    """
    Sum of color_diff over every pixel of two equally sized images.
    """
    if np.shape(current) != np.shape(target):
        raise ValueError("current and target must have the same shape")
    return int(np.sum(batch_color_diff(current, target)))


def perceptual_error(current: np.ndarray, target: np.ndarray) -> float:
    """
    Mean CIEDE2000 difference. Reporting only; acceptance uses color_diff.
    """
    if np.shape(current) != np.shape(target):
        raise ValueError("current and target must have the same shape")
    return float(np.mean(deltaE_ciede2000(rgb_to_lab(current), rgb_to_lab(target))))

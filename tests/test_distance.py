import numpy as np
from trufflify.core import distance

def test_rgb_distance_basic():
    a = np.array([255, 0, 0])
    b = np.array([0, 255, 0])
    d = distance.color_diff(a, b)
    assert d == 130050

def test_color_diff_ignores_alpha():
    assert distance.color_diff((10, 20, 30, 0), (10, 20, 30, 255)) == 0
    assert distance.color_diff((0, 0, 0, 255), (1, 2, 3, 255)) == 1 + 4 + 9

def test_color_diff_uint8_does_not_wrap():
    a = np.array([0, 0, 0], dtype=np.uint8)
    b = np.array([255, 255, 255], dtype=np.uint8)
    assert distance.color_diff(a, b) == 3 * 255 * 255

def test_batch_matches_scalar():
    rng = np.random.default_rng(0)
    a = rng.integers(0, 256, size=(5, 7, 4), dtype=np.uint8)
    b = rng.integers(0, 256, size=(5, 7, 4), dtype=np.uint8)
    batch = distance.batch_color_diff(a, b)
    assert batch.shape == (5, 7)
    assert batch[2, 3] == distance.color_diff(a[2, 3], b[2, 3])
    assert distance.total_error(a, b) == sum(
        distance.color_diff(a[y, x], b[y, x]) for y in range(5) for x in range(7)
    )

def test_perceptual_error():
    a = np.zeros((4, 4, 4), dtype=np.uint8)
    b = a.copy()
    assert distance.perceptual_error(a, b) < 1e-9
    b[..., 0] = 255
    assert distance.perceptual_error(a, b) > 0

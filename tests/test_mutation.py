import numpy as np
import pytest
from trufflify.core import distance
from trufflify.core.buffer import PixelBuffer
from trufflify.core.genes import Gene
from trufflify.core.mutation import MutationEngine, blend


def _random_pair(w=24, h=16, seed=0):
    rng = np.random.default_rng(seed)
    current = PixelBuffer.from_array(rng.integers(0, 256, size=(h, w, 3), dtype=np.uint8))
    target = PixelBuffer.from_array(rng.integers(0, 256, size=(h, w, 3), dtype=np.uint8))
    return current, target


def _solid(w, h, color):
    return PixelBuffer(w, h, fill=(*color, 255))


def _expected_trial(current, target, gene):
    """Straight per-pixel reference for one trial (no side effects)."""
    x0, x1, y0, y1 = gene.region(current.shape[1], current.shape[0])
    before = after = 0
    painted = {}
    for y in range(y0, y1):
        for x in range(x0, x1):
            if not gene.covers(x, y):
                continue
            blended = blend(current[y, x], gene.color, gene.alpha)
            before += distance.color_diff(current[y, x], target[y, x])
            after += distance.color_diff(blended, target[y, x])
            painted[(x, y)] = blended
    return before, after, painted


def test_blend_known_value():
    assert blend((200, 100, 50, 255), (0, 0, 0), 100) == (121, 60, 30, 255)


def test_blend_truncates():
    for cur, col in [((1, 2, 3), (254, 253, 252)), ((255, 0, 128), (0, 255, 127))]:
        out = blend(cur, col, 100)
        for ch in range(3):
            assert out[ch] == (100 * col[ch] + 155 * cur[ch]) // 255


def test_trial_matches_reference_computation():
    current, target = _random_pair(seed=1)
    engine = MutationEngine(target, current, seed=0)
    for gene in [Gene(3, 4, 5, (10, 200, 30)), Gene(23, 0, 9, (250, 5, 90)), Gene(12, 8, 2, (0, 0, 0))]:
        cur = engine.snapshot()
        before, after, painted = _expected_trial(cur, target.pixels, gene)
        result = engine.run_trial(gene)
        assert result.error_before == before
        assert result.error_after == after
        assert result.touched == len(painted)
        assert result.accepted == (after < before)
        if result.accepted:
            for (x, y), color in painted.items():
                assert engine.current.get_pixel(x, y) == color
        else:
            assert np.array_equal(engine.snapshot(), cur)


def test_improving_gene_is_kept():
    current = _solid(20, 20, (0, 0, 0))
    target = _solid(20, 20, (255, 0, 0))
    engine = MutationEngine(target, current, seed=0)
    result = engine.run_trial(Gene(10, 10, 4, (255, 0, 0)))
    assert result.accepted
    assert engine.accepted == 1
    assert engine.current.get_pixel(10, 10) == (100, 0, 0, 255)
    assert engine.current.get_pixel(13, 10) == (100, 0, 0, 255)
    # bounding square is half-open
    assert engine.current.get_pixel(14, 10) == (0, 0, 0, 255)
    assert engine.current.get_pixel(14, 14) == (0, 0, 0, 255)
    assert engine.current.get_pixel(6, 10) == (100, 0, 0, 255)
    assert engine.current.get_pixel(15, 10) == (0, 0, 0, 255)


def test_tie_is_rejected():
    current = _solid(10, 10, (100, 100, 100))
    target = _solid(10, 10, (100, 100, 100))
    engine = MutationEngine(target, current, seed=0)
    result = engine.run_trial(Gene(5, 5, 3, (100, 100, 100)))
    assert result.error_before == result.error_after == 0
    assert not result.accepted
    assert engine.accepted == 0


def test_rejected_trial_restores_exactly():
    current, target = _random_pair(seed=2)
    # make transparent pixels so a revert has to restore alpha too
    current.pixels[:4, :4, 3] = 0
    target.pixels[:] = current.pixels
    engine = MutationEngine(target, current, seed=0)
    before = engine.snapshot()
    result = engine.run_trial(Gene(2, 2, 6, (255, 255, 255)))
    assert not result.accepted
    assert result.touched > 0
    assert np.array_equal(engine.snapshot(), before)


def test_rejected_gene_repeats_identically():
    current, target = _random_pair(seed=3)
    target.pixels[:] = current.pixels
    engine = MutationEngine(target, current, seed=0)
    gene = Gene(12, 8, 7, (0, 255, 0))
    first = engine.run_trial(gene)
    second = engine.run_trial(gene)
    assert not first.accepted
    assert first.error_after > first.error_before == 0
    assert first == second


def test_accepted_paint_makes_pixels_opaque():
    current = PixelBuffer(8, 8)          # transparent black
    target = _solid(8, 8, (200, 200, 200))
    engine = MutationEngine(target, current, seed=0)
    assert engine.run_trial(Gene(4, 4, 2, (255, 255, 255))).accepted
    assert engine.current.get_pixel(4, 4)[3] == 255
    assert engine.current.get_pixel(0, 0) == (0, 0, 0, 0)


def test_gene_over_whole_small_buffer_touches_everything():
    current, target = _random_pair(w=10, h=10, seed=4)
    engine = MutationEngine(target, current, seed=0)
    result = engine.run_trial(Gene(0, 0, 30, (5, 5, 5)))
    assert result.region == (0, 10, 0, 10)
    assert result.touched == 100


def test_no_pixel_outside_region_changes():
    current, target = _random_pair(w=40, h=30, seed=5)
    engine = MutationEngine(target, current, seed=7)
    for _ in range(300):
        gene = engine.sampler.sample()
        before = engine.snapshot()
        result = engine.run_trial(gene)
        after = engine.snapshot()
        x0, x1, y0, y1 = result.region
        mask = np.ones((30, 40), dtype=bool)
        mask[y0:y1, x0:x1] = False
        assert np.array_equal(before[mask], after[mask])
        if not result.accepted:
            assert np.array_equal(before, after)


def test_total_error_never_increases():
    current, target = _random_pair(w=32, h=32, seed=6)
    engine = MutationEngine(target, current, seed=8)
    err = engine.error()
    for _ in range(10):
        engine.evolve(100)
        new_err = engine.error()
        assert new_err <= err
        err = new_err


def test_evolve_improves_from_blank_canvas():
    current = PixelBuffer(32, 32)
    target = _solid(32, 32, (180, 40, 90))
    engine = MutationEngine(target, current, seed=9)
    start = engine.error()
    engine.evolve(500)
    assert engine.error() < start
    assert engine.accepted > 0


def test_evolve_runs_exact_trial_count():
    current, target = _random_pair(seed=10)
    engine = MutationEngine(target, current, seed=11)
    engine.evolve(200)
    assert engine.trials == 200
    engine.evolve(1)
    assert engine.trials == 201
    assert 0 <= engine.accepted <= engine.trials


def test_evolve_rejects_non_positive_iterations():
    current, target = _random_pair()
    engine = MutationEngine(target, current, seed=0)
    with pytest.raises(ValueError):
        engine.evolve(0)


def test_same_seed_same_result():
    c1, t1 = _random_pair(seed=12)
    c2, t2 = _random_pair(seed=12)
    e1 = MutationEngine(t1, c1, seed=99)
    e2 = MutationEngine(t2, c2, seed=99)
    e1.evolve(300)
    e2.evolve(300)
    assert np.array_equal(e1.snapshot(), e2.snapshot())
    assert e1.accepted == e2.accepted


def test_mismatched_buffers_rejected():
    with pytest.raises(ValueError):
        MutationEngine(PixelBuffer(4, 4), PixelBuffer(4, 5))


def test_target_is_never_written():
    current, target = _random_pair(seed=13)
    original = target.snapshot()
    engine = MutationEngine(target, current, seed=1)
    engine.evolve(500)
    assert np.array_equal(target.pixels, original)

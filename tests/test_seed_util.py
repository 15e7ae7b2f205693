from fluid.seed_util import pick_ledges, resolve_seed


def test_same_seed_same_ledges():
    assert pick_ledges(50, 40, 99, 5) == pick_ledges(50, 40, 99, 5)


def test_ledges_fit_the_world():
    width, height = 30, 20
    ledges, seed_used = pick_ledges(width, height, 5, 20)
    assert seed_used == 5
    assert len(ledges) == 20
    for top, left, bottom, right in ledges:
        assert top == bottom
        assert 2 <= top <= height - 2
        assert 0 <= left <= right < width
        assert right - left + 1 >= 2


def test_relative_layout_scales_with_world():
    small, _ = pick_ledges(20, 20, 42, 3)
    large, _ = pick_ledges(40, 40, 42, 3)
    for (t1, _, _, _), (t2, _, _, _) in zip(small, large):
        assert abs(t2 - 2 * t1) <= 2


def test_tiny_world_has_no_ledges():
    ledges, _ = pick_ledges(2, 3, 1, 4)
    assert ledges == []


def test_random_seed_resolved():
    seed = resolve_seed(-1)
    assert 0 <= seed < 2**31
    assert resolve_seed(17) == 17

import numpy as np
import pytest

from fluid import ConfigurationError, Grid, SourceInjector, run, step, validate_rules
from fluid.scenario import build_scenario


def test_step_returns_new_grid_and_leaves_input(column):
    before = column.level.copy()
    nxt = step(column)
    assert nxt is not column
    assert np.array_equal(column.level, before)


def test_single_droplet_first_tick(column):
    g1 = step(column)
    assert g1.fill_level(0, 0) == pytest.approx(0.5)
    assert g1.fill_level(1, 0) == pytest.approx(0.5)
    assert g1.fill_level(2, 0) == 0.0


def test_single_droplet_second_tick(column):
    g2 = step(step(column))
    assert g2.fill_level(0, 0) == pytest.approx(0.0)
    # Row 1 passes half on while refilling from above.
    assert g2.fill_level(1, 0) == pytest.approx(0.5)
    assert g2.fill_level(2, 0) == pytest.approx(0.5)
    assert g2.total_volume() == pytest.approx(1.0)


def test_full_cell_needs_two_ticks_to_vacate():
    grid = Grid(1, 2)
    grid.inject_source(0, 0)
    g1 = step(grid)
    assert g1.fill_level(0, 0) > 0.0
    g2 = step(g1)
    assert g2.fill_level(0, 0) == pytest.approx(0.0)
    assert g2.fill_level(1, 0) == pytest.approx(1.0)


def test_water_lands_and_stays_on_bottom_row(column):
    grid = run(column, 10)
    assert grid.fill_level(2, 0) == pytest.approx(1.0)
    assert grid.fill_level(0, 0) == pytest.approx(0.0)
    assert grid.fill_level(1, 0) == pytest.approx(0.0)


def test_alternate_gravity_rate(column):
    g1 = step(column, gravity_rate=1.0)
    assert g1.fill_level(0, 0) == pytest.approx(0.0)
    assert g1.fill_level(1, 0) == pytest.approx(1.0)


def test_no_sideways_spread_while_below_has_room():
    grid = Grid(3, 3)
    grid.inject_source(0, 1)
    g1 = step(grid)
    assert g1.fill_level(0, 0) == 0.0
    assert g1.fill_level(0, 2) == 0.0
    assert g1.fill_level(1, 0) == 0.0
    assert g1.fill_level(1, 2) == 0.0


def test_single_row_never_moves():
    grid = Grid(3, 1)
    grid.set_obstacle(0, 1)
    grid.inject_source(0, 0)
    grid = run(grid, 5)
    assert grid.fill_level(0, 0) == 1.0
    assert grid.is_obstacle(0, 1)
    assert grid.fill_level(0, 1) == 0.0


def test_obstacle_cell_stays_dry():
    grid = Grid(3, 2)
    grid.set_obstacle_rect(1, 0, 1, 2)
    grid.set_obstacle(0, 1)
    grid.inject_source(0, 0)
    for _ in range(20):
        grid = step(grid)
        assert grid.fill_level(0, 1) == 0.0
        assert grid.is_obstacle(0, 1)
    # The sweep skips the wall and keeps feeding the far side.
    assert grid.fill_level(0, 2) > 0.0
    assert grid.fill_level(0, 0) > grid.fill_level(0, 2)
    assert grid.total_volume() == pytest.approx(1.0)


def test_lateral_sweep_jumps_a_wall(shelf):
    shelf.set_obstacle(0, 3)
    g1 = step(shelf)
    assert g1.is_obstacle(0, 3)
    assert g1.fill_level(0, 3) == 0.0
    # Distance 2 on the right: rate 1.0 * 0.1 / 2.
    assert g1.fill_level(0, 4) == pytest.approx(0.05)
    assert g1.fill_level(0, 1) == pytest.approx(0.095)
    assert g1.fill_level(0, 0) == pytest.approx(0.04275)
    assert g1.fill_level(0, 2) == pytest.approx(0.81225)
    assert g1.total_volume() == pytest.approx(1.0)


def test_lateral_sweep_stops_at_grid_edge():
    grid = Grid(2, 2)
    grid.set_obstacle_rect(1, 0, 1, 1)
    grid.set_obstacle(0, 1)
    grid.inject_source(0, 0)
    g1 = step(grid)
    assert g1.fill_level(0, 0) == 1.0
    assert g1.total_volume() == pytest.approx(1.0)


def test_lateral_first_tick_values(shelf):
    g1 = step(shelf)
    # Right sweep first, nearest cell first, each rate from the remaining source level.
    assert g1.fill_level(0, 3) == pytest.approx(0.1)
    assert g1.fill_level(0, 4) == pytest.approx(0.045)
    assert g1.fill_level(0, 1) == pytest.approx(0.0855)
    assert g1.fill_level(0, 0) == pytest.approx(0.0384750)
    assert g1.total_volume() == pytest.approx(1.0)


def test_lateral_spread_decays_with_distance(shelf):
    grid = run(shelf, 5)
    row = [grid.fill_level(0, c) for c in range(5)]
    assert row[1] > 0.0 and row[3] > 0.0
    assert row[1] >= row[0]
    assert row[3] >= row[4]
    assert row[2] == max(row)
    assert grid.total_volume() == pytest.approx(1.0)


def test_lateral_spread_levels_out(shelf):
    grid = run(shelf, 400)
    assert np.allclose(grid.level[0], 0.2, atol=1e-4)


def test_diagonal_slide_off_ledge():
    grid = Grid(3, 2)
    grid.set_obstacle(1, 1)
    grid.inject_source(0, 1)
    g1 = step(grid)
    assert g1.fill_level(0, 2) == pytest.approx(0.1)
    assert g1.fill_level(0, 0) == pytest.approx(0.09)
    assert g1.fill_level(1, 2) == pytest.approx(0.25)
    assert g1.fill_level(1, 0) == pytest.approx(0.25)
    assert g1.fill_level(0, 1) == pytest.approx(0.31)
    assert g1.total_volume() == pytest.approx(1.0)


def test_diagonal_skips_full_and_walled_targets():
    grid = Grid(3, 2)
    grid.set_obstacle(1, 1)
    grid.set_obstacle(1, 0)
    grid.level[1, 2] = 1.0
    grid.inject_source(0, 1)
    g1 = step(grid, lateral_coeff=0.0)
    assert g1.fill_level(1, 2) == pytest.approx(1.0)
    assert g1.fill_level(1, 0) == 0.0
    assert g1.fill_level(0, 1) == pytest.approx(1.0)


def test_water_arriving_this_tick_does_not_move_again():
    grid = Grid(1, 4)
    grid.inject_source(0, 0)
    g1 = step(grid, gravity_rate=1.0)
    # Fully moved one row; row 1 was empty before the tick so it did not pass it on.
    assert g1.fill_level(1, 0) == pytest.approx(1.0)
    assert g1.fill_level(2, 0) == 0.0


def test_volume_conserved_without_injection():
    cfg = {
        "world": {"width": 12, "height": 10},
        "ledges": 3,
        "seed": 7,
    }
    grid, _, _ = build_scenario(cfg)
    for c in range(2, 10):
        if not grid.is_obstacle(0, c):
            grid.inject_source(0, c)
    total = grid.total_volume()
    for _ in range(50):
        grid = step(grid)
    assert grid.total_volume() == pytest.approx(total)


def test_bounds_and_walls_hold_under_continuous_injection():
    cfg = {
        "world": {"width": 16, "height": 12},
        "ledges": 4,
        "seed": 3,
        "obstacles": [{"line": [11, 0, 8, 5]}],
        "sources": [[0, 4], [0, 8], [0, 12]],
        "source_interval": 2,
    }
    grid, injector, _ = build_scenario(cfg)
    walls = grid.obstacle.copy()
    for tick in range(120):
        injector.apply(grid, tick)
        grid = step(grid)
        assert grid.level.min() >= 0.0
        assert grid.level.max() <= 1.0
        assert np.array_equal(grid.obstacle, walls)
        assert not grid.level[walls].any()


def test_settling_reaches_fixed_point():
    grid = Grid(6, 5)
    grid.inject_source(0, 2)
    grid.inject_source(1, 2)
    grid = run(grid, 400)
    nxt = step(grid)
    assert np.max(np.abs(nxt.level - grid.level)) < 1e-9
    assert nxt.total_volume() == pytest.approx(2.0)


def test_run_applies_injector_without_touching_input():
    grid = Grid(3, 4)
    injector = SourceInjector([(0, 1)], interval=2)
    out = run(grid, 4, injector=injector)
    assert grid.total_volume() == 0.0
    assert out.total_volume() == pytest.approx(2.0)


@pytest.mark.parametrize(
    "rules",
    [
        {"capacity": 0.0},
        {"gravity_rate": -0.1},
        {"lateral_coeff": -1.0},
        {"diagonal_rate": -0.25},
        {"spread_distance": -1},
        {"spread_distance": 1.5},
    ],
)
def test_invalid_rules(rules, column):
    with pytest.raises(ConfigurationError):
        validate_rules(**rules)
    with pytest.raises(ConfigurationError):
        step(column, **rules)


def test_zero_spread_distance_disables_lateral(shelf):
    g1 = step(shelf, spread_distance=0, diagonal_rate=0.0)
    assert g1.fill_level(0, 2) == 1.0
    assert g1.total_volume() == pytest.approx(1.0)

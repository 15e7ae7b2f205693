import numpy as np
import pytest

from fluid import ConfigurationError
from fluid.constants import DIAGONAL_RATE, GRAVITY_RATE, LATERAL_COEFF, SPREAD_DISTANCE
from fluid.scenario import build_scenario, rules_from_config


def test_build_from_config():
    cfg = {
        "world": {"width": 10, "height": 8},
        "obstacles": [
            {"rect": [7, 0, 7, 9]},
            {"line": [3, 2, 3, 5]},
            {"cell": [5, 8]},
        ],
        "sources": [[0, 4], [0, 6]],
        "source_interval": 5,
        "seed": 11,
    }
    grid, injector, seed_used = build_scenario(cfg)
    assert grid.shape == (8, 10)
    assert grid.obstacle[7].all()
    assert grid.obstacle[3, 2:6].all()
    assert grid.is_obstacle(5, 8)
    assert grid.obstacle.sum() == 10 + 4 + 1
    assert injector.points == [(0, 4), (0, 6)]
    assert injector.interval == 5
    assert seed_used == 11
    # Sources are stamped by the first due tick, not at build time.
    assert grid.total_volume() == 0.0


def test_defaults_when_keys_missing():
    grid, injector, _ = build_scenario({})
    assert grid.shape == (48, 64)
    assert injector.points == []
    assert not grid.obstacle.any()


def test_seeded_ledges_are_reproducible():
    cfg = {"world": {"width": 40, "height": 30}, "ledges": 4, "seed": 1234}
    a, _, _ = build_scenario(cfg)
    b, _, _ = build_scenario(cfg)
    assert a.obstacle.any()
    assert np.array_equal(a.obstacle, b.obstacle)


def test_random_seed_is_reported():
    cfg = {"world": {"width": 40, "height": 30}, "ledges": 2, "seed": -1}
    grid, _, seed_used = build_scenario(cfg)
    again, _, _ = build_scenario({**cfg, "seed": seed_used})
    assert seed_used >= 0
    assert np.array_equal(grid.obstacle, again.obstacle)


@pytest.mark.parametrize(
    "cfg",
    [
        {"world": {"width": 0, "height": 5}},
        {"world": {"width": 5, "height": 5}, "sources": [[0, 5]]},
        {"world": {"width": 5, "height": 5}, "obstacles": [{"rect": [0, 0, 9, 9]}]},
        {"world": {"width": 5, "height": 5}, "obstacles": [{"rect": [0, 0, 1]}]},
        {"world": {"width": 5, "height": 5}, "obstacles": [{"circle": [2, 2, 1]}]},
        {"world": {"width": 5, "height": 5}, "sources": [[0, 1]], "source_interval": 0},
        {"capacity": 0},
        {"gravity_rate": -0.5},
        {"spread_distance": 1.5},
        {"lateral_coeff": "fast"},
    ],
)
def test_bad_scenarios_fail_fast(cfg):
    with pytest.raises(ConfigurationError):
        build_scenario(cfg)


def test_rules_default_to_constants():
    rules = rules_from_config({})
    assert rules["gravity_rate"] == GRAVITY_RATE
    assert rules["lateral_coeff"] == LATERAL_COEFF
    assert rules["diagonal_rate"] == DIAGONAL_RATE
    assert rules["spread_distance"] == SPREAD_DISTANCE


def test_rules_override():
    rules = rules_from_config({"gravity_rate": 1.0, "spread_distance": 2.0})
    assert rules["gravity_rate"] == 1.0
    assert rules["spread_distance"] == 2
    assert isinstance(rules["spread_distance"], int)


def test_rules_rejected():
    with pytest.raises(ConfigurationError):
        rules_from_config({"diagonal_rate": -1})


@pytest.mark.parametrize(
    "cfg",
    [{"spread_distance": 1.5}, {"spread_distance": 2.9}, {"capacity": "full"}],
)
def test_rules_checked_before_spread_distance_is_truncated(cfg):
    with pytest.raises(ConfigurationError):
        rules_from_config(cfg)

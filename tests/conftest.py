"""Shared fixtures for fluid and config tests."""

import pytest

import config
from fluid import Grid


@pytest.fixture
def column() -> Grid:
    """1 wide, 3 tall, full cell at the top."""
    grid = Grid(width=1, height=3)
    grid.inject_source(0, 0)
    return grid


@pytest.fixture
def shelf() -> Grid:
    """5 wide water row resting on a wall row; full cell in the middle."""
    grid = Grid(width=5, height=2)
    grid.set_obstacle_rect(1, 0, 1, 4)
    grid.inject_source(0, 2)
    return grid


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Point config persistence at a temp dir with an empty index."""
    monkeypatch.setattr(config, "CONFIG_DIR", tmp_path)
    monkeypatch.setattr(config, "LAST_FILE", tmp_path / "last.txt")
    monkeypatch.setattr(config, "_CONFIG_INDEX", set())
    return tmp_path

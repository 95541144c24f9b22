"""Shared pytest fixtures for PinkDotTool tests."""
import numpy as np
import pytest

from PinkDotTool import DefectPatternStore

PINK_DOT = 60000


def make_raw(width=100, height=100, seed=0, dots=((50, 50),)):
    """Random 12-bit-ish raw mosaic with bright pink dots at *dots*."""
    rng = np.random.default_rng(seed)
    raw = rng.integers(1000, 2000, size=(height, width), dtype=np.uint16)
    for x, y in dots:
        raw[y, x] = PINK_DOT
    return raw


@pytest.fixture
def raw_image() -> np.ndarray:
    """100x100 raw image with one pink dot at (50, 50)."""
    return make_raw()


@pytest.fixture
def raw_stack() -> np.ndarray:
    """Three distinct 100x100 frames stacked as (rows, cols, frames)."""
    return np.stack([make_raw(seed=i) for i in range(3)], axis=2)


@pytest.fixture
def store_650d() -> DefectPatternStore:
    """Store with a single-site 650D pattern at 100x100."""
    store = DefectPatternStore()
    store.register("650D", 100, 100, [(50, 50)])
    return store


@pytest.fixture
def dots_dir(tmp_path):
    """Directory holding a 650D 100x100 coordinate file."""
    directory = tmp_path / "dots"
    directory.mkdir()
    (directory / "650D_100x100.csv").write_text("x,y\n50,50\n")
    return directory

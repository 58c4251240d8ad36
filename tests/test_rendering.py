"""Tests for rendering helpers."""

import numpy as np
import pytest
from octachan.rendering import create_color_scheme, display_to_rgb, display_to_text


def test_display_to_rgb_orientation():
    display = np.zeros((64, 32), dtype=bool)
    display[3, 1] = True
    rgb = display_to_rgb(display, scale=2, on_color=(1, 2, 3), off_color=(0, 0, 0))
    assert rgb.shape == (64, 128, 3)
    assert tuple(rgb[2, 6]) == (1, 2, 3)
    assert tuple(rgb[0, 0]) == (0, 0, 0)


def test_display_to_rgb_rejects_bad_shape():
    with pytest.raises(ValueError):
        display_to_rgb(np.zeros((32, 64), dtype=bool))


def test_color_schemes():
    assert create_color_scheme("classic") == ((0, 255, 0), (0, 0, 0))
    with pytest.raises(ValueError):
        create_color_scheme("plaid")


def test_display_to_text():
    display = np.zeros((64, 32), dtype=bool)
    display[0, 0] = True
    lines = display_to_text(display).splitlines()
    assert len(lines) == 32
    assert lines[0] == "#" + "." * 63

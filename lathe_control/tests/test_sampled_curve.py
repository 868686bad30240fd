"""Tests for sampled-curve helpers: offsets, fold filtering, normals, walks."""

from __future__ import annotations

import numpy as np
import pytest

from lathe_control.curves import sampled


@pytest.fixture()
def vertical() -> np.ndarray:
    return np.column_stack([np.zeros(11), np.linspace(0.0, 1.0, 11)])


class TestOffset:
    def test_vertical_line_moves_in_x(self, vertical: np.ndarray) -> None:
        out = sampled.offset_points(vertical, 0.1)
        np.testing.assert_allclose(out[:, 0], 0.1)
        np.testing.assert_allclose(out[:, 1], vertical[:, 1], atol=1e-12)

    def test_zero_offset_is_a_copy(self, vertical: np.ndarray) -> None:
        out = sampled.offset_points(vertical, 0.0)
        np.testing.assert_allclose(out, vertical)
        assert out is not vertical

    def test_horizontal_line_moves_in_y(self) -> None:
        pts = np.column_stack([np.linspace(0.0, 1.0, 5), np.zeros(5)])
        out = sampled.offset_points(pts, 0.2)
        np.testing.assert_allclose(out[:, 1], -0.2)

    def test_single_point_unchanged(self) -> None:
        pts = np.array([[0.3, 0.4]])
        np.testing.assert_allclose(sampled.offset_points(pts, 1.0), pts)

    def test_fold_is_filtered(self) -> None:
        # (1, 0.1) doubles back; it and the point before it are dropped
        pts = np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0], [1.0, 0.1], [3.0, 0.1]])
        out = sampled.filter_folds(pts)
        np.testing.assert_allclose(out, [[0.0, 0.0], [1.0, 0.0], [3.0, 0.1]])

    def test_short_input_not_filtered(self) -> None:
        pts = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 0.01]])
        assert len(sampled.filter_folds(pts)) == 3


class TestNearestAndNormal:
    def test_index_of_nearest(self, vertical: np.ndarray) -> None:
        assert sampled.index_of_nearest(vertical, (0.2, 0.51)) == 5
        assert sampled.index_of_nearest(np.empty((0, 2)), (0.0, 0.0)) == -1

    def test_nearest_point_is_a_copy(self, vertical: np.ndarray) -> None:
        p = sampled.nearest_point(vertical, (0.0, 0.29))
        np.testing.assert_allclose(p, [0.0, 0.3])
        p[0] = 9.0
        assert vertical[3, 0] == 0.0
        assert sampled.nearest_point(np.empty((0, 2)), (0.0, 0.0)) is None

    def test_perpendicular_directions(self, vertical: np.ndarray) -> None:
        # Chord points +y, so (dy, -dx) is +x
        np.testing.assert_allclose(sampled.perpendicular(vertical, (0.0, 0.5), True), [1.0, 0.0])
        np.testing.assert_allclose(sampled.perpendicular(vertical, (0.0, 0.5), False), [-1.0, 0.0])

    def test_perpendicular_snaps_tiny_components(self, vertical: np.ndarray) -> None:
        v = sampled.perpendicular(vertical, (0.0, 0.5), True)
        assert v[1] == 0.0

    def test_perpendicular_degenerate(self) -> None:
        assert sampled.perpendicular(np.array([[0.0, 0.0]]), (0.0, 0.0), True) is None
        same = np.array([[1.0, 1.0], [1.0, 1.0]])
        assert sampled.perpendicular(same, (1.0, 1.0), True) is None


class TestWalks:
    def test_interpolate_forward_and_back(self, vertical: np.ndarray) -> None:
        np.testing.assert_allclose(
            sampled.interpolate_along(vertical, (0.0, 0.5), 0.25), [0.0, 0.75],
        )
        np.testing.assert_allclose(
            sampled.interpolate_along(vertical, (0.0, 0.5), -0.25), [0.0, 0.25],
        )

    def test_interpolate_off_the_end(self, vertical: np.ndarray) -> None:
        assert sampled.interpolate_along(vertical, (0.0, 0.9), 0.5) is None

    def test_interpolate_zero(self, vertical: np.ndarray) -> None:
        np.testing.assert_allclose(sampled.interpolate_along(vertical, (0.3, 0.3), 0.0), [0.3, 0.3])

    def test_subset_order(self, vertical: np.ndarray) -> None:
        fwd = sampled.subset(vertical, (0.0, 0.2), (0.0, 0.5))
        back = sampled.subset(vertical, (0.0, 0.5), (0.0, 0.2))
        assert len(fwd) == 4
        np.testing.assert_allclose(fwd, back[::-1])
        assert sampled.subset(np.empty((0, 2)), (0.0, 0.0), (1.0, 1.0)) is None

    def test_flip_x_and_length(self, vertical: np.ndarray) -> None:
        shifted = vertical + np.array([0.5, 0.0])
        flipped = sampled.flip_x(shifted)
        np.testing.assert_allclose(flipped[:, 0], -0.5)
        assert shifted[0, 0] == 0.5
        assert sampled.length(vertical) == pytest.approx(1.0)

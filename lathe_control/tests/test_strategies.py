"""Tests for cut strategies: rosette patterns, rosette, contour and thread cuts.

Most cases use a straight bore wall on the front at x = 1 and a pointed
cutter on the same side, so the cutter path is the wall itself.
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from lathe_control.curves.curve import FitStyle
from lathe_control.cutters import Cutter, CustomStyle, Frame, Location
from lathe_control.job_ir import (
    Comment,
    MoveXZCFast,
    MoveXZCRpm,
    MoveXZCVelocity,
    MoveXZFast,
    MoveXZVelocity,
    SpindleWrap,
    Turn,
)
from lathe_control.strategies import (
    CoarseFine,
    ContourCut,
    CustomPattern,
    Direction,
    Motion,
    Pattern,
    Rosette,
    RosetteCut,
    Rotation,
    StrategyError,
    ThreadCut,
)
from lathe_control.strategies.patterns import angle_check
from lathe_control.toolpath import Outline

SPR = 2600


@pytest.fixture()
def wall() -> Outline:
    return Outline(
        points=[(1.0, 0.0), (1.0, 1.0)],
        location=Location.FRONT_INSIDE,
        thickness=0.2,
        resolution=0.05,
    )


@pytest.fixture()
def drill() -> Cutter:
    return Cutter(name="drill", frame=Frame.DRILL, location=Location.FRONT_INSIDE)


def of_type(ml, kind) -> list:
    return [inst for inst in ml if type(inst) is kind]


# ---------------------------------------------------------------------------
# Shared pieces
# ---------------------------------------------------------------------------


class TestCommon:
    def test_rotation(self) -> None:
        assert not Rotation.PLUS_ALWAYS.negative(last=True)
        assert Rotation.NEG_ALWAYS.negative(last=False)
        assert not Rotation.NEG_LAST.negative(last=False)
        assert Rotation.NEG_LAST.negative(last=True)

    def test_coarse_fine_validation(self) -> None:
        assert CoarseFine(rotation="neg_last").rotation is Rotation.NEG_LAST
        with pytest.raises(ValueError, match="pass_step"):
            CoarseFine(pass_step=0)
        with pytest.raises(ValueError, match="last_depth"):
            CoarseFine(last_depth=-0.1)


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------


class TestPatterns:
    @pytest.mark.parametrize(
        ("pattern", "n", "expected"),
        [
            (Pattern.NONE, 0.3, 0.0),
            (Pattern.HALFSINE, 0.5, 1.0),
            (Pattern.HALFSINE, 0.0, 0.0),
            (Pattern.TRIANGLE, 0.25, 0.5),
            (Pattern.TRIANGLE, 0.5, 1.0),
            (Pattern.TRIANGLE, 1.25, 0.5),
            (Pattern.HEART, 0.0, 0.0),
            (Pattern.TUDOR, 0.0, 0.0),
            (Pattern.TUDOR, 0.5, 1.0),
        ],
    )
    def test_at(self, pattern: Pattern, n: float, expected: float) -> None:
        assert pattern.at(n) == pytest.approx(expected, abs=1e-12)

    def test_heart_is_symmetric(self) -> None:
        for n in (0.1, 0.2, 0.3, 0.45):
            assert Pattern.HEART.at(n) == pytest.approx(Pattern.HEART.at(1.0 - n))

    def test_angle_check(self) -> None:
        assert angle_check(-30.0) == pytest.approx(330.0)
        assert angle_check(720.0) == 0.0
        assert angle_check(359.5) == 359.5

    def test_custom_points_clamped_and_interpolated(self) -> None:
        tri = CustomPattern("tri", points=[(1.0, 0.0), (0.0, 0.0), (0.5, 2.0), (-0.5, 0.0)])
        assert tri.breakpoints() == [0.0, 0.0, 0.5, 1.0]
        assert tri.at(0.25) == pytest.approx(0.5)
        assert tri.at(1.25) == pytest.approx(0.5)
        assert tri.at(0.5) == 1.0

    def test_custom_curve_passes_through_points(self) -> None:
        bump = CustomPattern("bump", CustomStyle.CURVE, [(0.0, 0.0), (0.5, 1.0), (1.0, 0.0)])
        assert bump.at(0.5) == pytest.approx(1.0)
        assert 0.0 < bump.at(0.25) < 1.0


TRI = CustomPattern("tri", points=[(0.0, 0.0), (0.5, 1.0), (1.0, 0.0)])


class TestRosette:
    def test_amplitude_and_phase(self) -> None:
        r = Rosette(Pattern.TRIANGLE, repeat=2, p_to_p=0.1)
        assert r.amplitude_at(0.0) == pytest.approx(0.0)
        assert r.amplitude_at(90.0) == pytest.approx(0.1)
        assert r.amplitude_at(270.0) == pytest.approx(0.1)
        shifted = Rosette(Pattern.TRIANGLE, repeat=2, p_to_p=0.1, phase=180.0)
        assert shifted.amplitude_at(0.0) == pytest.approx(0.1)

    def test_invert_and_outside(self) -> None:
        r = Rosette(Pattern.TRIANGLE, repeat=2, p_to_p=0.1, invert=True)
        assert r.amplitude_at(0.0) == pytest.approx(0.1)
        assert r.amplitude_at(0.0, outside=True) == pytest.approx(0.0)

    def test_flat(self) -> None:
        assert Rosette().is_flat
        assert Rosette(Pattern.HEART, p_to_p=0.0).is_flat
        assert not Rosette("heart", p_to_p=0.01).is_flat

    def test_validation(self) -> None:
        with pytest.raises(ValueError, match="repeat"):
            Rosette(repeat=0)
        with pytest.raises(ValueError, match="p_to_p"):
            Rosette(p_to_p=-0.1)
        with pytest.raises(ValueError):
            Rosette(pattern="spiral")

    def test_custom_pattern_amplitude(self) -> None:
        r = Rosette(TRI, repeat=2, p_to_p=0.02)
        assert not r.is_flat
        assert r.follows_breakpoints
        assert r.amplitude_at(90.0) == pytest.approx(0.02)
        assert r.amplitude_at(135.0) == pytest.approx(0.01)

    def test_breakpoint_angles(self) -> None:
        assert Rosette(TRI, repeat=2, p_to_p=0.02).breakpoint_angles() == [
            0.0, 90.0, 180.0, 270.0, 360.0,
        ]
        shifted = Rosette(TRI, repeat=1, p_to_p=0.02, phase=90.0)
        assert shifted.breakpoint_angles() == [0.0, 90.0, 270.0, 360.0]

    def test_breakpoints_drop_level_middle(self) -> None:
        mesa = CustomPattern(
            "mesa", points=[(0.0, 0.0), (0.25, 1.0), (0.5, 1.0), (0.75, 1.0), (1.0, 0.0)],
        )
        assert Rosette(mesa, p_to_p=0.02).breakpoint_angles() == [0.0, 90.0, 270.0, 360.0]

    def test_builtin_pattern_has_no_breakpoints(self) -> None:
        assert not Rosette(Pattern.TRIANGLE, p_to_p=0.02).follows_breakpoints
        assert not Rosette(CustomPattern("c", CustomStyle.CURVE), p_to_p=0.02).follows_breakpoints
        with pytest.raises(TypeError, match="breakpoints"):
            Rosette(Pattern.TRIANGLE).breakpoint_angles()


# ---------------------------------------------------------------------------
# Rosette cut
# ---------------------------------------------------------------------------


SINE4 = Rosette(Pattern.HALFSINE, repeat=4, p_to_p=0.01)


class TestRosetteCut:
    def test_check(self, wall: Outline, drill: Cutter) -> None:
        RosetteCut(1.0, 0.5, 0.05, SINE4).check(wall, drill)
        with pytest.raises(StrategyError, match="second rosette"):
            RosetteCut(1.0, 0.5, 0.05, SINE4, motion=Motion.BOTH).check(wall, drill)
        with pytest.raises(StrategyError, match="at least 2 outline points"):
            RosetteCut(1.0, 0.5, 0.05, SINE4).check(Outline(points=[(1.0, 0.0)]), drill)

    def test_negative_depth(self) -> None:
        with pytest.raises(ValueError, match="cut_depth"):
            RosetteCut(1.0, 0.5, -0.01, SINE4)

    def test_circle_passes(self, wall: Outline, drill: Cutter) -> None:
        cut = RosetteCut(1.0, 0.5, 0.05, Rosette())
        ml = cut.make_instructions(wall, drill, CoarseFine(), SPR)
        assert isinstance(ml[0], Comment)
        assert ml[2] == SpindleWrap()
        assert isinstance(ml[3], MoveXZCFast)
        depths = [m.x - 1.0 for m in of_type(ml, MoveXZCVelocity)]
        assert depths == pytest.approx([0.02, 0.04, 0.045, 0.05])
        assert of_type(ml, Turn) == [Turn(360.0)] * 4
        assert ml[-1] == ml[3]
        assert len(ml) == 22

    def test_zero_pass_depth_cuts_once(self, wall: Outline, drill: Cutter) -> None:
        cut = RosetteCut(1.0, 0.5, 0.05, Rosette())
        ml = cut.make_instructions(wall, drill, CoarseFine(pass_depth=0.0), SPR)
        depths = [m.x - 1.0 for m in of_type(ml, MoveXZCVelocity)]
        assert depths == pytest.approx([0.045, 0.05])

    def test_no_last_pass(self, wall: Outline, drill: Cutter) -> None:
        cut = RosetteCut(1.0, 0.5, 0.05, Rosette())
        ml = cut.make_instructions(wall, drill, CoarseFine(last_depth=0.0), SPR)
        assert len(of_type(ml, MoveXZCVelocity)) == 3

    def test_negative_rotation(self, wall: Outline, drill: Cutter) -> None:
        cut = RosetteCut(1.0, 0.5, 0.05, Rosette())
        cf = CoarseFine(rotation=Rotation.NEG_LAST)
        turns = of_type(cut.make_instructions(wall, drill, cf, SPR), Turn)
        assert turns == [Turn(360.0)] * 3 + [Turn(-360.0)]

    def test_snap_to_path(self, wall: Outline, drill: Cutter) -> None:
        cut = RosetteCut(1.3, 0.52, 0.0, Rosette(), snap=True)
        ml = cut.make_instructions(wall, drill, CoarseFine(), SPR)
        assert ml[3].x == pytest.approx(1.0)
        assert ml[3].z == pytest.approx(0.5)
        free = RosetteCut(1.3, 0.52, 0.0, Rosette(), snap=False)
        ml = free.make_instructions(wall, drill, CoarseFine(), SPR)
        assert (ml[3].x, ml[3].z) == pytest.approx((1.3, 0.52))

    def test_follows_pattern(self, wall: Outline, drill: Cutter) -> None:
        cut = RosetteCut(1.0, 0.5, 0.05, SINE4)
        cf = CoarseFine(pass_step=325, last_step=325)
        ml = cut.make_instructions(wall, drill, cf, SPR)
        # 0.02 is shallow enough to be a circle; 0.04, 0.045, 0.05 follow
        assert len(of_type(ml, Turn)) == 1
        starts = [i for i, m in enumerate(ml) if isinstance(m, MoveXZCVelocity)]
        assert len(starts) == 4
        i = starts[1]
        assert ml[i].x == pytest.approx(1.04)
        peak = ml[i + 1]
        assert isinstance(peak, MoveXZCRpm)
        assert peak.c == pytest.approx(45.0)
        assert peak.x == pytest.approx(1.03)
        assert ml[i + 8].c == pytest.approx(360.0)

    def test_partial_step_closes_revolution(self, wall: Outline, drill: Cutter) -> None:
        cut = RosetteCut(1.0, 0.5, 0.05, SINE4)
        cf = CoarseFine(pass_step=1000, last_step=1000)
        ml = cut.make_instructions(wall, drill, cf, SPR)
        closing = [m for m in of_type(ml, MoveXZCRpm) if m.c == pytest.approx(360.0)]
        assert len(closing) == 3

    def test_in_air_moves_are_fast(self, wall: Outline, drill: Cutter) -> None:
        cut = RosetteCut(1.0, 0.5, 0.012, SINE4)
        cf = CoarseFine(pass_depth=0.005, pass_step=325, last_depth=0.0)
        ml = cut.make_instructions(wall, drill, cf, SPR)
        assert any(m.c == pytest.approx(45.0) for m in of_type(ml, MoveXZCFast))

    @pytest.mark.parametrize(
        ("motion", "expected"),
        [
            (Motion.PERP, (-0.01, 0.0)),
            (Motion.TANGENT, (0.0, -0.01)),
            (Motion.PUMP, (0.0, 0.01)),
            (Motion.ROCK, (-0.01, 0.0)),
        ],
    )
    def test_rosette_move(self, drill: Cutter, motion: Motion, expected: tuple) -> None:
        cut = RosetteCut(1.0, 0.5, 0.05, SINE4, motion=motion)
        move = cut.rosette_move(45.0, np.array([1.0, 0.0]), drill)
        np.testing.assert_allclose(move, expected, atol=1e-15)

    def test_both_uses_second_rosette_for_z(self, drill: Cutter) -> None:
        second = Rosette(Pattern.TRIANGLE, repeat=1, p_to_p=0.02)
        cut = RosetteCut(1.0, 0.5, 0.05, SINE4, motion="both", rosette2=second)
        move = cut.rosette_move(45.0, np.array([1.0, 0.0]), drill)
        np.testing.assert_allclose(move, (-0.01, 0.005))

    def test_outside_cutter_sees_mirror(self) -> None:
        cutter = Cutter(frame=Frame.DRILL, location=Location.FRONT_OUTSIDE)
        cut = RosetteCut(1.0, 0.5, 0.05, SINE4, motion=Motion.ROCK)
        move = cut.rosette_move(45.0, np.array([-1.0, 0.0]), cutter)
        np.testing.assert_allclose(move, (0.0, 0.0), atol=1e-15)


    def test_straight_custom_pattern_cuts_corners(self, wall: Outline, drill: Cutter) -> None:
        cut = RosetteCut(1.0, 0.5, 0.05, Rosette(TRI, repeat=2, p_to_p=0.02))
        ml = cut.make_instructions(wall, drill, CoarseFine(), SPR)
        assert len(ml) == 4 + 4 * 6 + 2
        assert ml[4] == SpindleWrap()
        first = ml[5:10]
        assert isinstance(first[0], MoveXZCVelocity)
        assert (first[0].x, first[0].z) == pytest.approx((1.02, 0.5))
        assert all(isinstance(m, MoveXZCRpm) for m in first[1:])
        assert [m.c for m in first] == [0.0, 90.0, 180.0, 270.0, 360.0]
        assert [m.x for m in first] == pytest.approx([1.02, 1.0, 1.02, 1.0, 1.02])
        assert all(type(m.x) is float and type(m.z) is float for m in first)

    def test_straight_custom_pattern_negative_pass(self, wall: Outline, drill: Cutter) -> None:
        cut = RosetteCut(1.0, 0.5, 0.05, Rosette(TRI, repeat=2, p_to_p=0.02))
        ml = cut.make_instructions(wall, drill, CoarseFine(rotation=Rotation.NEG_LAST), SPR)
        assert [m.c for m in ml[-7:-2]] == [0.0, -90.0, -180.0, -270.0, -360.0]
        assert [m.x for m in ml[-7:-2]] == pytest.approx([1.05, 1.03, 1.05, 1.03, 1.05])


# ---------------------------------------------------------------------------
# Contour cut
# ---------------------------------------------------------------------------


class TestContourCut:
    def test_parameters(self) -> None:
        assert ContourCut(step=1.0).step == 0.1
        assert ContourCut(step=0.0).step == 0.001
        cut = ContourCut(backoff=0.01, count1=2, depth1=0.02, count2=1, depth2=0.005)
        assert cut.num_passes == 3
        assert cut.total_depth == pytest.approx(0.035)
        assert cut.pass_depths() == pytest.approx([0.01, 0.03, 0.035])

    @pytest.mark.parametrize(
        "kwargs",
        [{"backoff": -0.1}, {"count1": 11}, {"count2": -1}, {"depth1": 0.2}, {"depth2": -0.01}],
    )
    def test_invalid(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            ContourCut(**kwargs)

    def test_pass_structure(self, wall: Outline, drill: Cutter) -> None:
        # 11 path points a step apart; every point after the first is one turn
        cut = ContourCut(step=0.1)
        ml = cut.make_instructions(wall, drill, CoarseFine(), SPR)
        assert len(ml) == 2 + 2 * 15
        assert ml[2] == Comment("Contour pass depth=0.0200")
        first = ml[3]
        assert isinstance(first, MoveXZVelocity)
        assert (first.x, first.z) == pytest.approx((1.02, 1.0))
        assert ml[4] == Turn(360.0)
        rpm = ml[5:15]
        assert all(isinstance(m, MoveXZCRpm) for m in rpm)
        assert [m.c for m in rpm] == [720.0 + 360.0 * i for i in range(10)]
        assert [m.z for m in rpm] == pytest.approx([0.9 - 0.1 * i for i in range(10)], abs=1e-9)
        assert all(type(m.x) is float and type(m.z) is float for m in rpm)
        assert ml[15] == Turn(4320.0)
        assert ml[16] == SpindleWrap()

    def test_first_to_last(self, wall: Outline, drill: Cutter) -> None:
        cut = ContourCut(step=0.1, direction="first_to_last")
        ml = cut.make_instructions(wall, drill, CoarseFine(), SPR)
        assert ml[3].z == pytest.approx(0.0, abs=1e-9)

    def test_safe_path_order(self, wall: Outline, drill: Cutter) -> None:
        wall.add_safe_point(0.5, 1.5)
        wall.add_safe_point(0.5, -0.5)
        ml = ContourCut(step=0.1, count2=0).make_instructions(wall, drill, CoarseFine(), SPR)
        assert ml[-2:] == [MoveXZFast(0.5, -0.5), MoveXZFast(0.5, 1.5)]
        cut = ContourCut(step=0.1, count2=0, direction=Direction.FIRST_TO_LAST)
        ml = cut.make_instructions(wall, drill, CoarseFine(), SPR)
        assert ml[-2:] == [MoveXZFast(0.5, 1.5), MoveXZFast(0.5, -0.5)]

    def test_stops_at_spindle_axis(self, drill: Cutter) -> None:
        crossing = Outline(points=[(0.5, 0.0), (-0.5, 1.0)], style=FitStyle.STRAIGHT)
        cut = ContourCut(step=0.1, count1=1, depth1=0.0, count2=0, direction=Direction.FIRST_TO_LAST)
        ml = cut.make_instructions(crossing, drill, CoarseFine(), SPR)
        rpm = of_type(ml, MoveXZCRpm)
        assert 0 < len(rpm) < 14
        assert all(m.x >= 0.0 for m in rpm)

    def test_no_passes(self, wall: Outline, drill: Cutter) -> None:
        ml = ContourCut(count1=0, count2=0).make_instructions(wall, drill, CoarseFine(), SPR)
        assert len(ml) == 2


# ---------------------------------------------------------------------------
# Thread cut
# ---------------------------------------------------------------------------


class TestThreadCut:
    def test_dimensions(self) -> None:
        t = ThreadCut(tpi=20)
        assert t.pitch == pytest.approx(0.05)
        assert t.full_depth == pytest.approx(0.05 * math.sqrt(3.0) / 2.0)
        assert t.engagement == pytest.approx(0.6 * t.full_depth)
        assert t.cut_depth == pytest.approx(0.8 * t.full_depth)
        assert t.outside_diameter(0.5) == pytest.approx(0.5 + 1.2 * t.full_depth)
        assert t.inside_diameter(t.outside_diameter(0.5)) == pytest.approx(0.5)

    @pytest.mark.parametrize(
        "kwargs", [{"tpi": 0}, {"tpi": 20, "starts": 0}, {"tpi": 20, "percent": 101}],
    )
    def test_invalid(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            ThreadCut(**kwargs)

    def test_check(self, wall: Outline, drill: Cutter) -> None:
        ThreadCut(20).check(wall, drill)
        three = Outline(points=[(1.0, 0.0), (1.0, 0.5), (1.0, 1.0)])
        with pytest.raises(StrategyError, match="exactly 2 outline points"):
            ThreadCut(20).check(three, drill)
        slanted = Outline(points=[(1.0, 0.0), (1.2, 1.0)])
        with pytest.raises(StrategyError, match="vertical"):
            ThreadCut(20).check(slanted, drill)

    def test_single_start(self, wall: Outline, drill: Cutter) -> None:
        t = ThreadCut(20)
        ml = t.make_instructions(wall, drill, CoarseFine(), SPR)
        assert len(ml) == 2 + 2 * 5 + 1
        assert ml[0].text.startswith("Thread: 20 tpi")
        d = t.cut_depth
        entry, plunge, cut, retract, wrap = ml[2:7]
        assert isinstance(entry, MoveXZCFast)
        assert (entry.x, entry.z, entry.c) == pytest.approx((0.99, 0.0, 0.0))
        assert isinstance(plunge, MoveXZVelocity)
        assert plunge.x == pytest.approx(1.0 + 0.707 * d)
        assert isinstance(cut, MoveXZCRpm)
        assert (cut.x, cut.z, cut.c) == pytest.approx((1.0 + 0.707 * d, 1.0, -7200.0))
        assert retract.x == pytest.approx(0.99)
        assert wrap == SpindleWrap()
        assert ml[8].x == pytest.approx(1.0 + d)
        last = ml[-1]
        assert isinstance(last, MoveXZCFast)
        assert (last.x, last.z, last.c) == pytest.approx((0.99, 1.0, 0.0))

    def test_multiple_starts(self, wall: Outline, drill: Cutter) -> None:
        ml = ThreadCut(20, starts=2).make_instructions(wall, drill, CoarseFine(), SPR)
        assert len(ml) == 2 + 2 * 2 * 5 + 1
        entries = [m.c for m in of_type(ml, MoveXZCFast)][:-1]
        assert entries == [0.0, 0.0, 180.0, 180.0]
        cuts = [m.c for m in of_type(ml, MoveXZCRpm)]
        assert cuts == pytest.approx([-3600.0, -3600.0, -3420.0, -3420.0])

    def test_outside_cutter_cuts_toward_axis(self, wall: Outline) -> None:
        outside = Cutter(frame=Frame.DRILL, location=Location.FRONT_OUTSIDE)
        t = ThreadCut(20)
        ml = t.make_instructions(wall, outside, CoarseFine(), SPR)
        assert ml[2].x == pytest.approx(1.21)
        assert ml[3].x == pytest.approx(1.2 - 0.707 * t.cut_depth)

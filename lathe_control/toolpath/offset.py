"""Cutter path from a digitized surface.

The digitized surface is where the operator placed the dots.  The cutter
path is the curve the cutter reference point must follow to touch that
surface, shifted along the local normal by a signed distance that depends
on the frame, the piece thickness and which sides the surface and the
cutter are on.
"""

from __future__ import annotations

import logging

import numpy as np

from lathe_control.curves import sampled
from lathe_control.curves.curve import Curve
from lathe_control.cutters.cutter import Cutter
from lathe_control.cutters.location import Location

logger = logging.getLogger(__name__)


def signed_offset(cutter: Cutter, surface_location: Location, thickness: float) -> float:
    """Distance from the digitized surface to the cutter path.

    Parameters
    ----------
    cutter : Cutter
        Cutter whose path is wanted.
    surface_location : Location
        Where the digitized surface is.
    thickness : float
        Wall thickness of the piece (inches, >= 0).

    Returns
    -------
    float
        Signed offset to pass to :func:`sampled.offset_points`.
    """
    same_side = surface_location.is_inside == cutter.location.is_inside
    if cutter.frame.is_disc:
        d = cutter.radius if same_side else cutter.radius + thickness
    else:
        d = 0.0 if same_side else thickness

    if (surface_location.is_front and cutter.location.is_inside) or (
        surface_location.is_back and cutter.location.is_outside
    ):
        d = -d
    return d


def cutter_path(
    surface: Curve,
    cutter: Cutter,
    surface_location: Location,
    thickness: float,
    resolution: float,
) -> np.ndarray:
    """Sampled cutter path for *cutter* following *surface*.

    Always rebuilt from the current surface; nothing is accumulated between
    calls.  The result has uniform point spacing of about *resolution*.
    """
    pts = surface.sample(resolution)
    if len(pts) == 0:
        return np.empty((0, 2), dtype=np.float64)

    d = signed_offset(cutter, surface_location, thickness)
    path = sampled.offset_points(pts, d)
    if surface_location.is_front != cutter.location.is_front:
        path = sampled.flip_x(path)
    path = sampled.resample_uniform(path, resolution)
    logger.debug(
        "Cutter path for %s: offset %.4f, %d -> %d points",
        cutter.name, d, len(pts), len(path),
    )
    return path

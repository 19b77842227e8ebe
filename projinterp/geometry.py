"""Projection data geometry descriptors.

This module provides the geometry description consumed by the resampling
engine: the family of a scanner geometry, the logical :class:`Bin`
coordinate, and :class:`ProjDataGeometry`, an immutable descriptor that
resolves bins into physical positions and sampling distances.

Engine code only talks to descriptors through the capability methods
``sampling_in_axis``, ``position_on_axis``, ``ring_radius``,
``intrinsic_tilt`` and ``geometry_family_tag``, so any object offering them
(e.g. a wrapper around a scanner library) can be used in its place.
"""

from __future__ import annotations

import enum
import math
from collections import namedtuple
from dataclasses import dataclass, replace
from typing import Optional

from .constants import _DTYPE, RING_RADIUS_TOLERANCE
from .volume import SampleVolume


# ============================================================================
# Geometry Families, Axes and Bins
# ============================================================================

class GeometryFamily(enum.Enum):
    """Detector geometry families with different tangential sampling."""

    ARC_CORRECTED = "arc_corrected"
    NON_ARC_CORRECTED = "non_arc_corrected_cylindrical"


class Axis(enum.IntEnum):
    """Sinogram axes, numbered like the axes of a sample volume array."""

    AXIAL = 0
    VIEW = 1
    TANGENTIAL = 2


Bin = namedtuple("Bin", ["segment", "view", "axial", "tangential"])
"""Logical projection data coordinate."""

REFERENCE_BIN = Bin(0, 0, 0, 0)


# ============================================================================
# Geometry Descriptor
# ============================================================================

@dataclass(frozen=True)
class ProjDataGeometry:
    """Immutable description of a segment-0 projection data configuration.

    Parameters
    ----------
    family : GeometryFamily
        Arc-corrected or non-arc-corrected cylindrical.
    num_views : int
        Number of views covering `view_span`.
    num_tangential_poss : int
        Number of tangential positions.
    num_axial_poss : int
        Number of axial positions (sinograms) in segment 0.
    tangential_spacing : float
        Bin size for arc-corrected data; detector pitch measured along the
        ring for non-arc-corrected data.
    axial_spacing : float
        Distance between consecutive sinograms.
    inner_ring_radius : float
        Detector ring radius.
    default_intrinsic_tilt : float, optional
        Angular tilt of the detector blocks in radians (default: 0.0).
    azimuthal_offset : float, optional
        Angle of view 0 in radians, excluding the tilt (default: 0.0).
    view_span : float, optional
        Angular range covered by all views (default: pi).
    min_tangential_pos_num : int, optional
        Logical index of the first tangential position. Defaults to
        ``-(num_tangential_poss // 2)``.

    Examples
    --------
    >>> geom = ProjDataGeometry(GeometryFamily.NON_ARC_CORRECTED, 96, 9, 5,
    ...                         tangential_spacing=2.0, axial_spacing=4.0,
    ...                         inner_ring_radius=400.0)
    >>> geom.max_tangential_pos_num
    4
    """

    family: GeometryFamily
    num_views: int
    num_tangential_poss: int
    num_axial_poss: int
    tangential_spacing: float
    axial_spacing: float
    inner_ring_radius: float
    default_intrinsic_tilt: float = 0.0
    azimuthal_offset: float = 0.0
    view_span: float = math.pi
    min_tangential_pos_num: Optional[int] = None

    def __post_init__(self):
        if self.num_views < 1 or self.num_tangential_poss < 1 or self.num_axial_poss < 1:
            raise ValueError("Projection data geometry needs at least one view, "
                             "tangential position and axial position")
        if self.min_tangential_pos_num is None:
            object.__setattr__(self, "min_tangential_pos_num", -(self.num_tangential_poss // 2))

    # ------------------------------------------------------------------
    # Index ranges
    # ------------------------------------------------------------------

    @property
    def min_view_num(self):
        return 0

    @property
    def max_view_num(self):
        return self.num_views - 1

    @property
    def max_tangential_pos_num(self):
        return self.min_tangential_pos_num + self.num_tangential_poss - 1

    @property
    def min_axial_pos_num(self):
        return 0

    @property
    def max_axial_pos_num(self):
        return self.num_axial_poss - 1

    @property
    def min_indices(self):
        return (self.min_axial_pos_num, self.min_view_num, self.min_tangential_pos_num)

    @property
    def max_indices(self):
        return (self.max_axial_pos_num, self.max_view_num, self.max_tangential_pos_num)

    @property
    def segment_shape(self):
        return (self.num_axial_poss, self.num_views, self.num_tangential_poss)

    # ------------------------------------------------------------------
    # Physical coordinates
    # ------------------------------------------------------------------

    def get_m(self, bin):
        """Axial position of a bin, centred on the middle sinogram."""
        return (bin.axial - 0.5 * (self.num_axial_poss - 1)) * self.axial_spacing

    def get_phi(self, bin):
        """Azimuthal angle of a bin, without intrinsic tilt."""
        return self.azimuthal_offset + bin.view * self.view_span / self.num_views

    def get_s(self, bin):
        """Signed distance of the line of response to the scanner axis."""
        if self.family is GeometryFamily.ARC_CORRECTED:
            return bin.tangential * self.tangential_spacing
        radius = self.inner_ring_radius
        return radius * math.sin(bin.tangential * self.tangential_spacing / radius)

    def get_sampling_in_m(self, bin):
        return self.axial_spacing

    def get_sampling_in_s(self, bin):
        """Local tangential sampling distance ``ds/dtangential`` at a bin."""
        if self.family is GeometryFamily.ARC_CORRECTED:
            return self.tangential_spacing
        angle = bin.tangential * self.tangential_spacing / self.inner_ring_radius
        return self.tangential_spacing * math.cos(angle)

    # ------------------------------------------------------------------
    # Capability interface used by the engine
    # ------------------------------------------------------------------

    def position_on_axis(self, axis, bin):
        """Physical position of `bin` along `axis` (m, phi or s)."""
        axis = Axis(axis)
        if axis is Axis.AXIAL:
            return self.get_m(bin)
        if axis is Axis.VIEW:
            return self.get_phi(bin)
        return self.get_s(bin)

    def sampling_in_axis(self, axis, bin):
        """Physical distance between `bin` and its successor along `axis`."""
        axis = Axis(axis)
        if axis is Axis.AXIAL:
            return self.get_sampling_in_m(bin)
        if axis is Axis.VIEW:
            return self.get_phi(bin._replace(view=bin.view + 1)) - self.get_phi(bin)
        return self.get_sampling_in_s(bin)

    def ring_radius(self):
        return self.inner_ring_radius

    def intrinsic_tilt(self):
        return self.default_intrinsic_tilt

    def geometry_family_tag(self):
        return self.family

    # ------------------------------------------------------------------
    # Derived descriptors and containers
    # ------------------------------------------------------------------

    def with_num_views(self, num_views):
        """Return a copy covering the same angular span with `num_views` views."""
        return replace(self, num_views=int(num_views))

    def get_empty_segment(self, segment_num=0, dtype=_DTYPE):
        """Zero-filled segment with this descriptor's index ranges."""
        if segment_num != 0:
            raise ValueError(f"Only segment 0 is supported, got segment {segment_num}")
        return SampleVolume.zeros(self.min_indices, self.max_indices, dtype=dtype)


# ============================================================================
# Compatibility
# ============================================================================

def check_compatible(geometry_in, geometry_out, tolerance=RING_RADIUS_TOLERANCE):
    """Validate that two geometries can be resampled onto each other.

    Parameters
    ----------
    geometry_in, geometry_out
        Geometry descriptors.
    tolerance : float, optional
        Largest accepted ring radius difference (default:
        ``RING_RADIUS_TOLERANCE``).

    Raises
    ------
    ValueError
        If the geometries belong to different families or their ring radii
        differ by more than `tolerance`.
    """
    if geometry_in.geometry_family_tag() != geometry_out.geometry_family_tag():
        raise ValueError(
            "Projection data resampling needs both geometries to be of the same type "
            "(e.g. both arc-corrected or both not arc-corrected), got "
            f"{geometry_in.geometry_family_tag().value} and {geometry_out.geometry_family_tag().value}"
        )
    # Strictly only needed for non-arc-corrected data, checked for all families
    if abs(geometry_in.ring_radius() - geometry_out.ring_radius()) > tolerance:
        raise ValueError(
            "Projection data resampling needs both geometries to have the same ring radius, "
            f"got {geometry_in.ring_radius()} and {geometry_out.ring_radius()}"
        )

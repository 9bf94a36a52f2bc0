"""
Spatial query service.

Wraps a bound GenerationEngine and applies the caller-facing policies:

  - caps: negative max_stars becomes 0
  - clamping: nearby radius is clamped to config.nearby_max_radius BEFORE
    the engine sees it; requested and effective radius are both reported
  - ordering: structure listings brightest first (id breaks ties), nearby
    listings by distance then id
  - truncation: after ordering, so the kept subset is deterministic
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from core.coords import clamp, distances_from
from core.types import Vec3
from .engine import GenerationEngine
from .space_objects import Star, StarSystem, SystemQuery

ESTIMATE_REFERENCE_RADIUS = 500.0    # ly


@dataclass
class StructureResult:
    stars:                 List[Star]
    estimated_total_stars: int        # advisory only
    requested_max_stars:   int
    max_stars:             int        # effective cap

    @property
    def count(self) -> int:
        return len(self.stars)


@dataclass
class NearbyResult:
    center:           Vec3
    stars:            List[Star]
    requested_radius: float
    radius:           float           # effective radius, after clamping
    max_stars:        int
    requested_max_stars: int
    distances:        List[float] = field(default_factory=list)

    @property
    def radius_clamped(self) -> bool:
        return self.radius != self.requested_radius

    @property
    def count(self) -> int:
        return len(self.stars)


def effective_cap(max_stars: int) -> int:
    return max(0, int(max_stars))


def effective_radius(requested: float, max_radius: float) -> float:
    if math.isnan(requested):
        return 0.0
    return clamp(float(requested), 0.0, float(max_radius))


def order_by_salience(stars: List[Star]) -> List[Star]:
    """Brightest first; equal luminosity falls back to ascending id."""
    return sorted(stars, key=lambda s: (-s.luminosity, s.id))


class SpatialQueryService:
    """Range and structure queries over one engine. Holds no state of its own."""

    def __init__(self, engine: GenerationEngine):
        self.engine = engine

    def get_structure(self, max_stars: int) -> StructureResult:
        cap = effective_cap(max_stars)
        stars = self.engine.get_galactic_structure(cap) if cap > 0 else []
        stars = order_by_salience(stars)[:cap]
        estimate = self.engine.estimate_total_stars(ESTIMATE_REFERENCE_RADIUS)
        return StructureResult(
            stars=stars,
            estimated_total_stars=max(0, int(round(estimate))),
            requested_max_stars=int(max_stars),
            max_stars=cap,
        )

    def get_nearby_stars(self, center: Vec3, radius: float, max_stars: int) -> NearbyResult:
        requested = float(radius)
        r = effective_radius(requested, self.engine.config.nearby_max_radius)
        cap = effective_cap(max_stars)

        print(f"Nearby query at ({center.x:.1f}, {center.y:.1f}, {center.z:.1f}) ly: "
              f"requested radius {requested:g} ly, using {r:g} ly, "
              f"cap {cap:,} (requested {int(max_stars):,})")

        stars: List[Star] = []
        if r > 0.0 and cap > 0:
            stars = self.engine.get_nearby_stars(center, r, cap)

        dist = np.zeros(0)
        if stars:
            pts = np.array([s.position.as_tuple() for s in stars], dtype=np.float64)
            ids = np.array([s.id for s in stars], dtype=np.int64)
            dist = distances_from(pts, center.as_tuple())
            keep = np.nonzero(dist <= r)[0]
            order = keep[np.lexsort((ids[keep], dist[keep]))][:cap]
            stars = [stars[i] for i in order]
            dist = dist[order]

        return NearbyResult(
            center=center,
            stars=stars,
            requested_radius=requested,
            radius=r,
            max_stars=cap,
            requested_max_stars=int(max_stars),
            distances=[float(d) for d in dist],
        )

    def get_star_system(self, star_id: int, position: Optional[Vec3] = None) -> StarSystem:
        return self.engine.get_star_system(SystemQuery(star_id=star_id, position=position))

"""
Generation engine contract and galaxy density model.

The query layer never generates anything itself: it pulls stars and systems
from a GenerationEngine, which must be a pure function of
(seed, config, query). `ProceduralEngine` (procedural.py) is the reference
implementation; tests plug in their own engines through the same contract.

Contract
--------
  Engine.new(seed) / Engine.new_with_config(seed, config)
  engine.config                                  → GeneratorConfig
  engine.galaxy.radius                           → float (ly)
  engine.get_galactic_structure(max_stars)       → list[Star]
  engine.estimate_total_stars(reference_radius)  → float
  engine.get_nearby_stars(position, radius, max) → list[Star]
  engine.get_star_system(SystemQuery)            → StarSystem
"""

from __future__ import annotations
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from core.types import Vec3
from .config import GeneratorConfig
from .space_objects import Star, StarSystem, SystemQuery


U64_MASK = 0xFFFFFFFFFFFFFFFF


# ---------------------------------------------------------------------------
# Density model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GalaxyModel:
    """
    Exponential disk centred on the origin, truncated at `radius`.

        rho(R, z) = rho_0 * exp(-R / scale_length) * exp(-|z| / scale_height)

    rho_0 is chosen so that the density at the solar radius equals
    `local_density` (stars per cubic light-year).
    """
    radius:        float = 50_000.0
    scale_length:  float = 9_000.0
    scale_height:  float = 1_000.0
    solar_radius:  float = 26_000.0
    local_density: float = 0.004

    @property
    def central_density(self) -> float:
        return self.local_density * math.exp(self.solar_radius / self.scale_length)

    @property
    def solar_position(self) -> Vec3:
        return Vec3(self.solar_radius, 0.0, 0.0)

    def density(self, x, y, z):
        """Stars per ly^3 at (x, y, z). Accepts scalars or numpy arrays."""
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        z = np.asarray(z, dtype=np.float64)
        r = np.hypot(x, y)
        rho = self.central_density * np.exp(-r / self.scale_length) * np.exp(-np.abs(z) / self.scale_height)
        rho = np.where(r <= self.radius, rho, 0.0)
        if rho.ndim == 0:
            return float(rho)
        return rho

    def total_stars(self) -> float:
        """Analytic integral of the density over the truncated disk."""
        h = self.scale_length
        u = self.radius / h
        radial = 2.0 * math.pi * h * h * (1.0 - (1.0 + u) * math.exp(-u))
        vertical = 2.0 * self.scale_height
        return self.central_density * radial * vertical

    def effective_volume(self) -> float:
        """Volume (ly^3) that, filled at local density, holds the whole galaxy."""
        return self.total_stars() / self.local_density


# ---------------------------------------------------------------------------
# Engine contract
# ---------------------------------------------------------------------------

class GenerationEngine(ABC):
    """
    Base class for deterministic generation engines.

    Engines are immutable from the outside: the session replaces the whole
    engine when seed or config change instead of editing it in place.
    """

    def __init__(self, seed: int, config: Optional[GeneratorConfig] = None,
                 galaxy: Optional[GalaxyModel] = None):
        self.seed = int(seed)
        self.seed_u64 = self.seed & U64_MASK
        self.config = config if config is not None else GeneratorConfig()
        self.galaxy = galaxy if galaxy is not None else GalaxyModel()

    @classmethod
    def new(cls, seed: int) -> GenerationEngine:
        return cls(seed)

    @classmethod
    def new_with_config(cls, seed: int, config: GeneratorConfig) -> GenerationEngine:
        return cls(seed, config)

    @abstractmethod
    def get_galactic_structure(self, max_stars: int) -> List[Star]:
        """Representative stars across the galaxy, at most max_stars."""

    @abstractmethod
    def estimate_total_stars(self, reference_radius: float) -> float:
        """Advisory population estimate extrapolated from a local sample."""

    @abstractmethod
    def get_nearby_stars(self, position: Vec3, radius: float, max_stars: int) -> List[Star]:
        """Stars within radius (ly) of position, at most max_stars."""

    @abstractmethod
    def get_star_system(self, query: SystemQuery) -> StarSystem:
        """Full hierarchy for the star identified by query.star_id."""

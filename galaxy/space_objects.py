"""
space_objects.py
================
Data model for generated galaxy content.

CONTENTS:
  Star                  — one star of the field (id, position in ly, mass, type)
  StellarConfiguration  — closed set of variants: Single, CloseBinary,
                          WideBinary, HierarchicalTriple, UnstableTriple
  StellarComponent      — bound group of 1-2 stars hosting its own planets
  Planet / Moon         — planets (AU) and their moons (km)
  AsteroidBelt/Asteroid — belts with a bounded list of largest bodies
  OortCloud / Comet     — optional outer cloud with notable comets
  StarSystem            — root aggregate returned for one star id

Units:
  Star positions in light-years, planet/belt/comet positions in AU,
  moon positions in km. Planet, moon, asteroid and comet positions lie on
  their orbit, so the radial coordinate is the orbital radius.
  Star mass in solar masses, planet mass in Earth masses, moon mass in
  lunar masses, asteroid/comet mass in kg, belt/cloud total mass in
  Earth masses.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from core.types import Vec3


# ---------------------------------------------------------------------------
# Stars
# ---------------------------------------------------------------------------

class StarType(Enum):
    """Stellar classification (main sequence classes + evolved/remnant objects)"""
    O            = "o"
    B            = "b"
    A            = "a"
    F            = "f"
    G            = "g"
    K            = "k"
    M            = "m"
    RED_GIANT    = "red_giant"
    WHITE_DWARF  = "white_dwarf"
    NEUTRON_STAR = "neutron_star"
    BLACK_HOLE   = "black_hole"


# (mass_min, mass_max) in solar masses, (t_min, t_max) in K
_STAR_PHYSICS: dict[StarType, Tuple[Tuple[float, float], Tuple[float, float]]] = {
    StarType.O:            ((16.0, 90.0),  (30000.0, 50000.0)),
    StarType.B:            ((2.1, 16.0),   (10000.0, 30000.0)),
    StarType.A:            ((1.4, 2.1),    (7500.0, 10000.0)),
    StarType.F:            ((1.04, 1.4),   (6000.0, 7500.0)),
    StarType.G:            ((0.8, 1.04),   (5200.0, 6000.0)),
    StarType.K:            ((0.45, 0.8),   (3700.0, 5200.0)),
    StarType.M:            ((0.08, 0.45),  (2400.0, 3700.0)),
    StarType.RED_GIANT:    ((0.8, 8.0),    (3200.0, 5000.0)),
    StarType.WHITE_DWARF:  ((0.5, 1.4),    (8000.0, 40000.0)),
    StarType.NEUTRON_STAR: ((1.1, 2.3),    (600000.0, 1000000.0)),
    StarType.BLACK_HOLE:   ((3.0, 20.0),   (0.0, 0.0)),
}

MAIN_SEQUENCE = (StarType.O, StarType.B, StarType.A, StarType.F,
                 StarType.G, StarType.K, StarType.M)


def mass_range(star_type: StarType) -> Tuple[float, float]:
    return _STAR_PHYSICS[star_type][0]


def main_sequence_type(mass: float) -> StarType:
    """Main-sequence class for a given mass (solar masses)."""
    for st in MAIN_SEQUENCE:
        lo, hi = _STAR_PHYSICS[st][0]
        if mass >= lo:
            return st
    return StarType.M


def star_luminosity(star_type: StarType, mass: float) -> float:
    """
    Luminosity in solar units.
    Main sequence: piecewise mass-luminosity relation.
    """
    m = max(mass, 0.0)
    if star_type in MAIN_SEQUENCE:
        if m < 0.43:
            return 0.23 * m ** 2.3
        if m < 2.0:
            return m ** 4.0
        if m < 55.0:
            return 1.4 * m ** 3.5
        return 32000.0 * m
    if star_type == StarType.RED_GIANT:
        return 60.0 * m ** 2.0
    if star_type == StarType.WHITE_DWARF:
        return 0.001 * m
    if star_type == StarType.NEUTRON_STAR:
        return 1.0e-5
    if star_type == StarType.BLACK_HOLE:
        return 0.0
    raise ValueError(f"No luminosity model for {star_type!r}")


def luminosity_array(star_types: List[StarType], masses: np.ndarray) -> np.ndarray:
    """Vectorised star_luminosity, same relations."""
    m = np.maximum(np.asarray(masses, dtype=np.float64), 0.0)
    out = np.zeros(m.shape, dtype=np.float64)
    codes = np.array([st.value for st in star_types], dtype=object)
    ms = np.isin(codes, [st.value for st in MAIN_SEQUENCE])
    out = np.where(ms & (m < 0.43), 0.23 * m ** 2.3, out)
    out = np.where(ms & (m >= 0.43) & (m < 2.0), m ** 4.0, out)
    out = np.where(ms & (m >= 2.0) & (m < 55.0), 1.4 * m ** 3.5, out)
    out = np.where(ms & (m >= 55.0), 32000.0 * m, out)
    out = np.where(codes == StarType.RED_GIANT.value, 60.0 * m ** 2.0, out)
    out = np.where(codes == StarType.WHITE_DWARF.value, 0.001 * m, out)
    out = np.where(codes == StarType.NEUTRON_STAR.value, 1.0e-5, out)
    return out


def star_temperature(star_type: StarType, mass: float) -> float:
    """Effective temperature (K): linear across the class' mass range."""
    (m0, m1), (t0, t1) = _STAR_PHYSICS[star_type]
    frac = (mass - m0) / (m1 - m0)
    frac = min(1.0, max(0.0, frac))
    return t0 + (t1 - t0) * frac


@dataclass(frozen=True)
class Star:
    """A generated star. Immutable for a given (seed, config, id)."""
    id:        int
    position:  Vec3            # light-years
    mass:      float           # solar masses
    star_type: StarType

    @property
    def luminosity(self) -> float:
        return star_luminosity(self.star_type, self.mass)

    @property
    def temperature(self) -> float:
        return star_temperature(self.star_type, self.mass)


# ---------------------------------------------------------------------------
# Stellar configuration (closed set of variants)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StellarConfiguration:
    """Base of the configuration variants. Never instantiated directly."""

    @property
    def star_count(self) -> int:
        raise NotImplementedError


@dataclass(frozen=True)
class Single(StellarConfiguration):
    @property
    def star_count(self) -> int:
        return 1


@dataclass(frozen=True)
class CloseBinary(StellarConfiguration):
    separation_au: float = 0.1
    is_contact:    bool = False

    @property
    def star_count(self) -> int:
        return 2


@dataclass(frozen=True)
class WideBinary(StellarConfiguration):
    separation_au: float = 100.0

    @property
    def star_count(self) -> int:
        return 2


@dataclass(frozen=True)
class HierarchicalTriple(StellarConfiguration):
    inner_separation_au: float = 0.2
    outer_separation_au: float = 500.0

    @property
    def star_count(self) -> int:
        return 3


@dataclass(frozen=True)
class UnstableTriple(StellarConfiguration):
    @property
    def star_count(self) -> int:
        return 3


# ---------------------------------------------------------------------------
# Planets and moons
# ---------------------------------------------------------------------------

class PlanetType(Enum):
    DWARF         = "dwarf"
    TERRESTRIAL   = "terrestrial"
    SUPER_EARTH   = "super_earth"
    DESERT        = "desert"
    OCEAN         = "ocean"
    LAVA          = "lava"
    MINI_NEPTUNE  = "mini_neptune"
    SUB_NEPTUNE   = "sub_neptune"
    ICE_GIANT     = "ice_giant"
    GAS_GIANT     = "gas_giant"
    HOT_JUPITER   = "hot_jupiter"
    CHTHONIAN     = "chthonian"
    CARBON        = "carbon"
    CORELESS      = "coreless"


class MoonType(Enum):
    ROCKY       = "rocky"
    ICY         = "icy"
    ICE_ROCK    = "ice_rock"
    OCEAN       = "ocean"
    VOLCANIC    = "volcanic"
    CAPTURED    = "captured"
    ATMOSPHERIC = "atmospheric"


@dataclass
class Moon:
    moon_type: MoonType
    mass:      float           # lunar masses
    position:  Vec3            # km, planet-centred

    @property
    def orbital_radius(self) -> float:
        return self.position.norm()


@dataclass
class Planet:
    planet_type: PlanetType
    mass:        float         # Earth masses
    position:    Vec3          # AU, component barycentre-centred
    moons:       List[Moon] = field(default_factory=list)

    @property
    def orbital_radius(self) -> float:
        return self.position.norm()


# ---------------------------------------------------------------------------
# Minor bodies
# ---------------------------------------------------------------------------

class AsteroidType(Enum):
    CARBONACEOUS = "C"
    SILICATE     = "S"
    METALLIC     = "M"


class CometType(Enum):
    SHORT_PERIOD = "short_period"
    LONG_PERIOD  = "long_period"
    HYPERBOLIC   = "hyperbolic"


@dataclass
class Asteroid:
    asteroid_type:  AsteroidType
    mass:           float      # kg
    diameter:       float      # km
    orbital_radius: float      # AU
    position:       Vec3       # AU


@dataclass
class AsteroidBelt:
    """
    A belt of minor bodies. `largest_bodies` lists notable members only;
    the population itself is summarised by `asteroid_count`.
    """
    name:           str
    inner_radius:   float      # AU
    outer_radius:   float      # AU
    total_mass:     float      # Earth masses
    asteroid_count: int
    largest_bodies: List[Asteroid] = field(default_factory=list)


@dataclass
class Comet:
    comet_type:       CometType
    mass:             float    # kg
    nucleus_diameter: float    # km
    orbital_radius:   float    # AU (semi-major axis, or perihelion scale for hyperbolic)
    eccentricity:     float
    position:         Vec3     # AU


@dataclass
class OortCloud:
    inner_radius:         float   # AU
    outer_radius:         float   # AU
    estimated_population: int     # not materialised
    total_mass:           float   # Earth masses
    notable_comets:       List[Comet] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Components and systems
# ---------------------------------------------------------------------------

@dataclass
class StellarComponent:
    """
    One gravitationally bound group (1-2 stars) inside a system.
    Planets are split by this component's frost line.
    """
    star_indices:         List[int]
    barycenter:           Vec3     # AU, system-centred
    combined_mass:        float
    internal_separation:  float    # AU, 0 for a lone star
    is_interacting:       bool
    planet_inner_limit:   float    # AU
    planet_outer_limit:   float    # AU
    frost_line:           float    # AU
    habitable_zone_inner: float    # AU
    habitable_zone_outer: float    # AU
    inner_planets:        List[Planet] = field(default_factory=list)
    outer_planets:        List[Planet] = field(default_factory=list)

    @property
    def planets(self) -> List[Planet]:
        return self.inner_planets + self.outer_planets


@dataclass
class StarSystem:
    """
    Full hierarchy for one queried star id.

    System-level planets, frost line and habitable zone describe the primary
    component (the one holding star index 0); for a single star they mirror
    its only component.
    """
    star_id:              int
    position:             Vec3     # light-years
    stars:                List[Star]
    configuration:        StellarConfiguration
    stellar_components:   List[StellarComponent]
    inner_planets:        List[Planet]
    outer_planets:        List[Planet]
    asteroid_belts:       List[AsteroidBelt]
    oort_cloud:           Optional[OortCloud]
    frost_line:           float
    habitable_zone_inner: float
    habitable_zone_outer: float

    @property
    def all_planets(self) -> List[Planet]:
        planets: List[Planet] = []
        for comp in self.stellar_components:
            planets.extend(comp.planets)
        return planets


@dataclass(frozen=True)
class SystemQuery:
    star_id:  int
    position: Optional[Vec3] = None    # hint only, see ProceduralEngine.get_star_system

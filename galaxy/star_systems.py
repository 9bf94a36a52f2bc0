"""
star_systems.py
===============
Builds the full hierarchy of one star system from its primary star.

Everything is drawn from a single numpy Generator seeded from
(galaxy seed, primary id), so a system is reproduced exactly on every call.

Pipeline:
  1. configuration   — Single / CloseBinary / WideBinary / HierarchicalTriple /
                       UnstableTriple, more likely for massive primaries
  2. companions      — main-sequence companions with mass ratio q in [0.1, 1]
  3. components      — bound groups, barycentres, planet-hosting limits,
                       frost line and habitable zone from combined luminosity
  4. planets + moons — geometric orbit spacing between the limits, type
                       chosen by zone (hot / habitable / warm / beyond frost)
  5. belts + Oort    — around the primary component

Scaling relations:
  frost line     = 2.7 AU * sqrt(L)
  habitable zone = sqrt(L / 1.1) .. sqrt(L / 0.53) AU
"""

from __future__ import annotations
import math
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from core.coords import polar_to_cart, sph_to_cart
from core.types import Vec3
from .space_objects import (
    Star, StarType, main_sequence_type,
    StellarConfiguration, Single, CloseBinary, WideBinary,
    HierarchicalTriple, UnstableTriple,
    StellarComponent, Planet, PlanetType, Moon, MoonType,
    AsteroidBelt, Asteroid, AsteroidType, OortCloud, Comet, CometType,
    StarSystem,
)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

AU_PER_LY = 63241.077
EARTH_MASS_KG = 5.9722e24
CONTACT_SEPARATION_AU = 0.03
MIN_PLANET_INNER_LIMIT_AU = 0.03
MAX_PLANET_OUTER_LIMIT_AU = 100.0
MAX_PLANETS_PER_COMPONENT = 9
OORT_CLOUD_CHANCE = 0.8

# kg/m^3
_ASTEROID_DENSITY = {
    AsteroidType.CARBONACEOUS: 1400.0,
    AsteroidType.SILICATE:     2700.0,
    AsteroidType.METALLIC:     5300.0,
}
_COMET_DENSITY = 600.0

# (type, weight) — main belt follows the observed C/S/M split
_MAIN_BELT_MIX = [
    (AsteroidType.CARBONACEOUS, 75),
    (AsteroidType.SILICATE,     17),
    (AsteroidType.METALLIC,      8),
]
_OUTER_BELT_MIX = [
    (AsteroidType.CARBONACEOUS, 90),
    (AsteroidType.SILICATE,      7),
    (AsteroidType.METALLIC,      3),
]

_HOT_PLANETS = [
    (PlanetType.LAVA,        30),
    (PlanetType.TERRESTRIAL, 20),
    (PlanetType.SUPER_EARTH, 15),
    (PlanetType.HOT_JUPITER, 15),
    (PlanetType.CHTHONIAN,   10),
    (PlanetType.CARBON,      10),
]
_HABITABLE_PLANETS = [
    (PlanetType.OCEAN,        30),
    (PlanetType.TERRESTRIAL,  30),
    (PlanetType.SUPER_EARTH,  20),
    (PlanetType.DESERT,       10),
    (PlanetType.MINI_NEPTUNE, 10),
]
_WARM_PLANETS = [
    (PlanetType.TERRESTRIAL,  25),
    (PlanetType.DESERT,       25),
    (PlanetType.SUPER_EARTH,  20),
    (PlanetType.MINI_NEPTUNE, 15),
    (PlanetType.DWARF,        10),
    (PlanetType.CARBON,        5),
]
_COLD_PLANETS = [
    (PlanetType.GAS_GIANT,    35),
    (PlanetType.ICE_GIANT,    25),
    (PlanetType.SUB_NEPTUNE,  15),
    (PlanetType.MINI_NEPTUNE, 10),
    (PlanetType.DWARF,        10),
    (PlanetType.CORELESS,      5),
]

# Earth masses, sampled log-uniform
_PLANET_MASS = {
    PlanetType.DWARF:        (0.001, 0.1),
    PlanetType.TERRESTRIAL:  (0.3, 2.0),
    PlanetType.SUPER_EARTH:  (2.0, 10.0),
    PlanetType.DESERT:       (0.2, 3.0),
    PlanetType.OCEAN:        (0.5, 5.0),
    PlanetType.LAVA:         (0.2, 5.0),
    PlanetType.MINI_NEPTUNE: (3.0, 10.0),
    PlanetType.SUB_NEPTUNE:  (5.0, 20.0),
    PlanetType.ICE_GIANT:    (10.0, 50.0),
    PlanetType.GAS_GIANT:    (50.0, 4000.0),
    PlanetType.HOT_JUPITER:  (100.0, 4000.0),
    PlanetType.CHTHONIAN:    (5.0, 50.0),
    PlanetType.CARBON:       (0.5, 10.0),
    PlanetType.CORELESS:     (0.5, 5.0),
}

_WARM_MOONS = [
    (MoonType.ROCKY,    60),
    (MoonType.VOLCANIC, 25),
    (MoonType.CAPTURED, 15),
]
_COLD_MOONS = [
    (MoonType.ICY,         35),
    (MoonType.ICE_ROCK,    25),
    (MoonType.OCEAN,       15),
    (MoonType.CAPTURED,    15),
    (MoonType.ATMOSPHERIC, 10),
]


def _weighted_choice(rng: np.random.Generator, choices: Sequence[Tuple[object, int]]):
    """Weighted random selection from a list of (item, weight) tuples."""
    weights = np.array([w for _, w in choices], dtype=np.float64)
    idx = rng.choice(len(choices), p=weights / weights.sum())
    return choices[int(idx)][0]


def _log_uniform(rng: np.random.Generator, lo: float, hi: float) -> float:
    return float(10.0 ** rng.uniform(math.log10(lo), math.log10(hi)))


# ---------------------------------------------------------------------------
# Configuration and companions
# ---------------------------------------------------------------------------

def pick_configuration(primary: Star, rng: np.random.Generator) -> StellarConfiguration:
    if primary.star_type in (StarType.NEUTRON_STAR, StarType.BLACK_HOLE):
        p_multiple = 0.1
    else:
        p_multiple = min(0.75, 0.25 + 0.2 * primary.mass)

    if rng.random() >= p_multiple:
        return Single()

    r = rng.random()
    if r < 0.35:
        sep = _log_uniform(rng, 0.01, 0.5)
        return CloseBinary(separation_au=sep, is_contact=sep < CONTACT_SEPARATION_AU)
    if r < 0.75:
        return WideBinary(separation_au=_log_uniform(rng, 50.0, 5000.0))
    if r < 0.93:
        return HierarchicalTriple(
            inner_separation_au=_log_uniform(rng, 0.05, 1.0),
            outer_separation_au=_log_uniform(rng, 100.0, 5000.0),
        )
    return UnstableTriple()


def companion_offsets_au(configuration: StellarConfiguration,
                         rng: np.random.Generator) -> List[Vec3]:
    """Offsets (AU) of each star from the primary, primary first."""
    offsets = [Vec3()]
    if isinstance(configuration, Single):
        return offsets
    if isinstance(configuration, (CloseBinary, WideBinary)):
        offsets.append(Vec3(configuration.separation_au, 0.0, 0.0))
        return offsets
    if isinstance(configuration, HierarchicalTriple):
        offsets.append(Vec3(configuration.inner_separation_au, 0.0, 0.0))
        offsets.append(Vec3(configuration.outer_separation_au, 0.0, 0.0))
        return offsets
    if isinstance(configuration, UnstableTriple):
        for k in (1, 2):
            d = float(rng.uniform(5.0, 50.0))
            offsets.append(Vec3.of(*polar_to_cart(d, k * 2.0 * math.pi / 3.0)))
        return offsets
    raise TypeError(f"Unhandled configuration {configuration!r}")


def make_companions(primary: Star, offsets: List[Vec3], rng: np.random.Generator,
                    member_id: Callable[[int], int]) -> List[Star]:
    stars = [primary]
    for k, off in enumerate(offsets[1:], start=1):
        q = float(rng.uniform(0.1, 1.0))
        mass = max(0.08, min(primary.mass, 20.0) * q)
        pos = Vec3(primary.position.x + off.x / AU_PER_LY,
                   primary.position.y + off.y / AU_PER_LY,
                   primary.position.z + off.z / AU_PER_LY)
        stars.append(Star(id=member_id(k), position=pos, mass=mass,
                          star_type=main_sequence_type(mass)))
    return stars


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------

def make_component(stars: List[Star], indices: List[int], barycenter: Vec3,
                   internal_separation: float, is_interacting: bool,
                   neighbour_distance: Optional[float]) -> StellarComponent:
    mass = sum(stars[i].mass for i in indices)
    lum = sum(stars[i].luminosity for i in indices)
    sqrt_l = math.sqrt(lum)

    inner = max(MIN_PLANET_INNER_LIMIT_AU, 0.05 * sqrt_l)
    if is_interacting:
        # circumbinary orbits are unstable inside ~3x the pair separation
        inner = max(inner, 3.0 * internal_separation)
    outer = min(MAX_PLANET_OUTER_LIMIT_AU, 40.0 * math.sqrt(mass))
    if neighbour_distance is not None:
        outer = min(outer, neighbour_distance / 3.0)

    return StellarComponent(
        star_indices=list(indices),
        barycenter=barycenter,
        combined_mass=mass,
        internal_separation=internal_separation,
        is_interacting=is_interacting,
        planet_inner_limit=inner,
        planet_outer_limit=outer,
        frost_line=2.7 * sqrt_l,
        habitable_zone_inner=math.sqrt(lum / 1.1),
        habitable_zone_outer=math.sqrt(lum / 0.53),
    )


def _barycentre(stars: List[Star], indices: List[int], offsets: List[Vec3]) -> Vec3:
    m = sum(stars[i].mass for i in indices)
    return Vec3(sum(stars[i].mass * offsets[i].x for i in indices) / m,
                sum(stars[i].mass * offsets[i].y for i in indices) / m,
                sum(stars[i].mass * offsets[i].z for i in indices) / m)


def _centre(v: Vec3, c: Vec3) -> Vec3:
    return Vec3(v.x - c.x, v.y - c.y, v.z - c.z)


def make_components(stars: List[Star], configuration: StellarConfiguration,
                    offsets: List[Vec3]) -> List[StellarComponent]:
    """
    Group stars into components. Barycentres are relative to the
    system barycentre. The component holding star 0 always comes first.
    """
    everyone = list(range(len(stars)))
    sys_bary = _barycentre(stars, everyone, offsets)

    if isinstance(configuration, Single):
        return [make_component(stars, [0], Vec3(), 0.0, False, None)]

    if isinstance(configuration, CloseBinary):
        return [make_component(stars, [0, 1], Vec3(), configuration.separation_au, True, None)]

    if isinstance(configuration, WideBinary):
        sep = configuration.separation_au
        return [
            make_component(stars, [i], _centre(offsets[i], sys_bary), 0.0, False, sep)
            for i in (0, 1)
        ]

    if isinstance(configuration, HierarchicalTriple):
        outer = configuration.outer_separation_au
        pair_bary = _barycentre(stars, [0, 1], offsets)
        return [
            make_component(stars, [0, 1], _centre(pair_bary, sys_bary),
                           configuration.inner_separation_au, True, outer),
            make_component(stars, [2], _centre(offsets[2], sys_bary), 0.0, False, outer),
        ]

    if isinstance(configuration, UnstableTriple):
        comps = []
        for i in everyone:
            nearest = min(offsets[i].distance_to(offsets[j]) for j in everyone if j != i)
            comps.append(make_component(stars, [i], _centre(offsets[i], sys_bary),
                                        0.0, False, nearest))
        return comps

    raise TypeError(f"Unhandled configuration {configuration!r}")


# ---------------------------------------------------------------------------
# Planets and moons
# ---------------------------------------------------------------------------

def _planet_type(r: float, comp: StellarComponent, rng: np.random.Generator) -> PlanetType:
    if r >= comp.frost_line:
        return _weighted_choice(rng, _COLD_PLANETS)
    if r < 0.15 * comp.frost_line:
        return _weighted_choice(rng, _HOT_PLANETS)
    if comp.habitable_zone_inner <= r <= comp.habitable_zone_outer:
        return _weighted_choice(rng, _HABITABLE_PLANETS)
    return _weighted_choice(rng, _WARM_PLANETS)


def make_moons(planet_mass: float, beyond_frost: bool, rng: np.random.Generator) -> List[Moon]:
    if planet_mass >= 10.0:
        n = int(rng.integers(0, 13))
    elif planet_mass >= 0.5:
        n = int(rng.integers(0, 3))
    else:
        n = int(rng.integers(0, 2))

    planet_radius_km = 6371.0 * planet_mass ** 0.3
    orbit_km = planet_radius_km * float(rng.uniform(3.0, 6.0))
    mix = _COLD_MOONS if beyond_frost else _WARM_MOONS
    moons = []
    for _ in range(n):
        angle = float(rng.uniform(0.0, 2.0 * math.pi))
        moons.append(Moon(
            moon_type=_weighted_choice(rng, mix),
            mass=_log_uniform(rng, 0.001, 2.5),
            position=Vec3.of(*polar_to_cart(orbit_km, angle)),
        ))
        orbit_km *= float(rng.uniform(1.3, 2.0))
    return moons


def populate_planets(comp: StellarComponent, rng: np.random.Generator) -> None:
    """Fill comp.inner_planets / comp.outer_planets, split at the frost line."""
    lo, hi = comp.planet_inner_limit, comp.planet_outer_limit
    if hi <= lo * 1.5:
        return
    count = int(rng.integers(0, MAX_PLANETS_PER_COMPONENT + 1))
    r = lo * float(rng.uniform(1.0, 1.6))
    for _ in range(count):
        if r > hi:
            break
        ptype = _planet_type(r, comp, rng)
        mass = _log_uniform(rng, *_PLANET_MASS[ptype])
        angle = float(rng.uniform(0.0, 2.0 * math.pi))
        x, y, z = polar_to_cart(r, angle)
        planet = Planet(
            planet_type=ptype,
            mass=mass,
            position=Vec3(x, y, z),
            moons=make_moons(mass, r >= comp.frost_line, rng),
        )
        if planet.orbital_radius < comp.frost_line:
            comp.inner_planets.append(planet)
        else:
            comp.outer_planets.append(planet)
        r *= float(rng.uniform(1.4, 2.1))


# ---------------------------------------------------------------------------
# Minor bodies
# ---------------------------------------------------------------------------

def _asteroid(inner: float, outer: float, mix, rng: np.random.Generator) -> Asteroid:
    atype = _weighted_choice(rng, mix)
    diameter = _log_uniform(rng, 20.0, 1000.0)
    radius_m = diameter * 500.0
    mass = _ASTEROID_DENSITY[atype] * 4.0 / 3.0 * math.pi * radius_m ** 3
    r = float(rng.uniform(inner, outer))
    incl = abs(float(rng.normal(0.0, 0.1)))
    phi = float(rng.uniform(0.0, 2.0 * math.pi))
    return Asteroid(
        asteroid_type=atype,
        mass=mass,
        diameter=diameter,
        orbital_radius=r,
        position=Vec3.of(*sph_to_cart(r, math.pi / 2.0 - incl, phi)),
    )


def _belt(name: str, inner: float, outer: float, mass_range: Tuple[float, float],
          mix, rng: np.random.Generator) -> AsteroidBelt:
    count = int(_log_uniform(rng, 1.0e4, 1.0e7))
    n_bodies = min(count, int(rng.integers(3, 9)))
    bodies = [_asteroid(inner, outer, mix, rng) for _ in range(n_bodies)]
    bodies.sort(key=lambda a: a.diameter, reverse=True)
    return AsteroidBelt(
        name=name,
        inner_radius=inner,
        outer_radius=outer,
        total_mass=_log_uniform(rng, *mass_range),
        asteroid_count=count,
        largest_bodies=bodies,
    )


def make_belts(comp: StellarComponent, rng: np.random.Generator) -> List[AsteroidBelt]:
    belts = []
    frost = comp.frost_line
    if frost > comp.planet_inner_limit and rng.random() < 0.6:
        belts.append(_belt("Main Belt", 0.75 * frost, 1.05 * frost,
                           (1.0e-4, 1.0e-1), _MAIN_BELT_MIX, rng))
    if rng.random() < 0.7:
        planets = comp.planets
        last = max((p.orbital_radius for p in planets), default=0.0)
        inner = max(last * 1.3, 30.0 * math.sqrt(comp.combined_mass))
        outer = inner * float(rng.uniform(1.4, 1.8))
        belts.append(_belt("Outer Belt", inner, outer, (1.0e-2, 1.0), _OUTER_BELT_MIX, rng))
    return belts


def _comet(inner: float, outer: float, rng: np.random.Generator) -> Comet:
    r = rng.random()
    if r < 0.2:
        ctype = CometType.SHORT_PERIOD
        a = float(rng.uniform(3.0, 40.0))
        e = float(rng.uniform(0.2, 0.7))
    elif r < 0.9:
        ctype = CometType.LONG_PERIOD
        a = float(rng.uniform(inner, outer))
        e = float(rng.uniform(0.9, 0.999))
    else:
        ctype = CometType.HYPERBOLIC
        a = float(rng.uniform(inner, outer))
        e = float(rng.uniform(1.0001, 1.1))
    diameter = _log_uniform(rng, 1.0, 40.0)
    radius_m = diameter * 500.0
    theta = math.acos(float(rng.uniform(-1.0, 1.0)))
    phi = float(rng.uniform(0.0, 2.0 * math.pi))
    return Comet(
        comet_type=ctype,
        mass=_COMET_DENSITY * 4.0 / 3.0 * math.pi * radius_m ** 3,
        nucleus_diameter=diameter,
        orbital_radius=a,
        eccentricity=e,
        position=Vec3.of(*sph_to_cart(a, theta, phi)),
    )


def make_oort_cloud(comp: StellarComponent, configuration: StellarConfiguration,
                    rng: np.random.Generator) -> Optional[OortCloud]:
    """None when the system keeps no bound outer cloud."""
    if isinstance(configuration, UnstableTriple):
        return None
    if rng.random() >= OORT_CLOUD_CHANCE:
        return None
    m = comp.combined_mass
    inner = 2000.0 * math.sqrt(m) * float(rng.uniform(0.8, 1.2))
    outer = max(50000.0 * m ** (1.0 / 3.0) * float(rng.uniform(0.8, 1.4)), 5.0 * inner)
    population = int(1.0e11 * m * float(rng.uniform(0.3, 3.0)))
    comets = [_comet(inner, outer, rng) for _ in range(int(rng.integers(2, 7)))]
    mean_mass = sum(c.mass for c in comets) / len(comets)
    return OortCloud(
        inner_radius=inner,
        outer_radius=outer,
        estimated_population=population,
        total_mass=population * mean_mass / EARTH_MASS_KG,
        notable_comets=comets,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def build_star_system(star_id: int, primary: Star, rng: np.random.Generator,
                      member_id: Callable[[int], int]) -> StarSystem:
    """
    Generate the system around `primary`.

    Args:
        star_id: id the caller asked for (primary or companion)
        primary: the system's primary star
        rng: generator seeded for this system only
        member_id: maps a member index (1, 2) to the companion's star id
    """
    configuration = pick_configuration(primary, rng)
    offsets = companion_offsets_au(configuration, rng)
    stars = make_companions(primary, offsets, rng, member_id)
    components = make_components(stars, configuration, offsets)
    for comp in components:
        populate_planets(comp, rng)

    home = components[0]
    return StarSystem(
        star_id=star_id,
        position=primary.position,
        stars=stars,
        configuration=configuration,
        stellar_components=components,
        inner_planets=list(home.inner_planets),
        outer_planets=list(home.outer_planets),
        asteroid_belts=make_belts(home, rng),
        oort_cloud=make_oort_cloud(home, configuration, rng),
        frost_line=home.frost_line,
        habitable_zone_inner=home.habitable_zone_inner,
        habitable_zone_outer=home.habitable_zone_outer,
    )

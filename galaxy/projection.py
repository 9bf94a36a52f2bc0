"""
System projector: StarSystem -> nested plain dict.

The dict mirrors the data model one to one (components keep their own
planets, belts keep their largest bodies, comets stay under the Oort cloud).
Every enum goes through the label tables in labels.py, so an unmapped variant
raises UnmappedVariantError instead of producing a placeholder. The
`oort_cloud` key is left out entirely when the system has none.
"""

from __future__ import annotations
from dataclasses import fields
from typing import Any, Dict

from .labels import (
    star_type_label, planet_type_label, moon_type_label,
    asteroid_type_label, comet_type_label, configuration_label,
)
from .space_objects import (
    Star, StellarConfiguration, StellarComponent, Planet, Moon,
    AsteroidBelt, Asteroid, OortCloud, Comet, StarSystem,
)


def _star_to_dict(star: Star) -> Dict[str, Any]:
    return {
        "id": star.id,
        "star_type": star_type_label(star.star_type),
        "mass": star.mass,
        "luminosity": star.luminosity,
        "temperature": star.temperature,
        "position": star.position.to_dict(),
    }


def _configuration_to_dict(configuration: StellarConfiguration) -> Dict[str, Any]:
    out: Dict[str, Any] = {"type": configuration_label(configuration)}
    for f in fields(configuration):
        out[f.name] = getattr(configuration, f.name)
    return out


def _moon_to_dict(moon: Moon) -> Dict[str, Any]:
    return {
        "moon_type": moon_type_label(moon.moon_type),
        "mass": moon.mass,
        "orbital_radius": moon.orbital_radius,
        "position": moon.position.to_dict(),
    }


def _planet_to_dict(planet: Planet) -> Dict[str, Any]:
    return {
        "planet_type": planet_type_label(planet.planet_type),
        "mass": planet.mass,
        "orbital_radius": planet.orbital_radius,
        "position": planet.position.to_dict(),
        "moons": [_moon_to_dict(m) for m in planet.moons],
        "moon_count": len(planet.moons),
    }


def _component_to_dict(comp: StellarComponent) -> Dict[str, Any]:
    return {
        "star_indices": list(comp.star_indices),
        "barycenter": comp.barycenter.to_dict(),
        "combined_mass": comp.combined_mass,
        "internal_separation": comp.internal_separation,
        "is_interacting": comp.is_interacting,
        "planet_inner_limit": comp.planet_inner_limit,
        "planet_outer_limit": comp.planet_outer_limit,
        "frost_line": comp.frost_line,
        "habitable_zone_inner": comp.habitable_zone_inner,
        "habitable_zone_outer": comp.habitable_zone_outer,
        "inner_planets": [_planet_to_dict(p) for p in comp.inner_planets],
        "outer_planets": [_planet_to_dict(p) for p in comp.outer_planets],
    }


def _asteroid_to_dict(asteroid: Asteroid) -> Dict[str, Any]:
    return {
        "asteroid_type": asteroid_type_label(asteroid.asteroid_type),
        "mass": asteroid.mass,
        "diameter": asteroid.diameter,
        "orbital_radius": asteroid.orbital_radius,
        "position": asteroid.position.to_dict(),
    }


def _belt_to_dict(belt: AsteroidBelt) -> Dict[str, Any]:
    return {
        "name": belt.name,
        "inner_radius": belt.inner_radius,
        "outer_radius": belt.outer_radius,
        "total_mass": belt.total_mass,
        "asteroid_count": belt.asteroid_count,
        "largest_bodies": [_asteroid_to_dict(a) for a in belt.largest_bodies],
    }


def _comet_to_dict(comet: Comet) -> Dict[str, Any]:
    return {
        "comet_type": comet_type_label(comet.comet_type),
        "mass": comet.mass,
        "nucleus_diameter": comet.nucleus_diameter,
        "orbital_radius": comet.orbital_radius,
        "eccentricity": comet.eccentricity,
        "position": comet.position.to_dict(),
    }


def _oort_to_dict(cloud: OortCloud) -> Dict[str, Any]:
    return {
        "inner_radius": cloud.inner_radius,
        "outer_radius": cloud.outer_radius,
        "estimated_population": cloud.estimated_population,
        "total_mass": cloud.total_mass,
        "notable_comets": [_comet_to_dict(c) for c in cloud.notable_comets],
    }


def project_system(system: StarSystem) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "star_id": system.star_id,
        "position": system.position.to_dict(),
        "stars": [_star_to_dict(s) for s in system.stars],
        "configuration": _configuration_to_dict(system.configuration),
        "stellar_components": [_component_to_dict(c) for c in system.stellar_components],
        "inner_planets": [_planet_to_dict(p) for p in system.inner_planets],
        "outer_planets": [_planet_to_dict(p) for p in system.outer_planets],
        "asteroid_belts": [_belt_to_dict(b) for b in system.asteroid_belts],
        "frost_line": system.frost_line,
        "habitable_zone_inner": system.habitable_zone_inner,
        "habitable_zone_outer": system.habitable_zone_outer,
    }
    if system.oort_cloud is not None:
        out["oort_cloud"] = _oort_to_dict(system.oort_cloud)
    return out


def summarize_system(system: StarSystem) -> Dict[str, int]:
    """Counts used for the one-line status print."""
    planets = system.all_planets
    return {
        "stars": len(system.stars),
        "components": len(system.stellar_components),
        "planets": len(planets),
        "moons": sum(len(p.moons) for p in planets),
        "asteroid_belts": len(system.asteroid_belts),
        "notable_comets": len(system.oort_cloud.notable_comets) if system.oort_cloud else 0,
    }

"""Pytest configuration and fixtures."""

import pytest
import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.types import Vec3
from galaxy.config import GeneratorConfig
from galaxy.engine import GenerationEngine
from galaxy.errors import UnknownStarError
from galaxy.space_objects import (
    Star, StarType, StarSystem,
    HierarchicalTriple, Planet, PlanetType, Moon, MoonType,
    AsteroidBelt, Asteroid, AsteroidType, OortCloud, Comet, CometType,
)
from galaxy.star_systems import make_components, companion_offsets_au


def make_star(star_id, x=0.0, y=0.0, z=0.0, mass=1.0, star_type=StarType.G):
    return Star(id=star_id, position=Vec3(x, y, z), mass=mass, star_type=star_type)


class FakeEngine(GenerationEngine):
    """
    Engine returning a fixed star list, ignoring caps and radius.
    Records every call so tests can check what the query layer forwarded.
    """

    def __init__(self, seed, config=None, galaxy=None, stars=None,
                 estimate=1234.6, system=None):
        super().__init__(seed, config, galaxy)
        self.stars = list(stars or [])
        self.estimate = estimate
        self.system = system
        self.calls = []

    def get_galactic_structure(self, max_stars):
        self.calls.append(("structure", max_stars))
        return list(self.stars)

    def estimate_total_stars(self, reference_radius):
        self.calls.append(("estimate", reference_radius))
        return self.estimate

    def get_nearby_stars(self, position, radius, max_stars):
        self.calls.append(("nearby", position, radius, max_stars))
        return list(self.stars)

    def get_star_system(self, query):
        self.calls.append(("system", query))
        if self.system is None or query.star_id != self.system.star_id:
            raise UnknownStarError(query.star_id)
        return self.system


@pytest.fixture
def scattered_stars():
    """Stars around the origin at distances 0, 3, 5, 5, 12 and 40 ly."""
    return [
        make_star(7, 40.0, 0.0, 0.0, mass=0.3, star_type=StarType.M),
        make_star(5, 0.0, 5.0, 0.0, mass=1.2, star_type=StarType.F),
        make_star(3, 0.0, 0.0, 5.0, mass=1.2, star_type=StarType.F),
        make_star(9, 12.0, 0.0, 0.0, mass=3.0, star_type=StarType.B),
        make_star(1, 0.0, 0.0, 0.0, mass=1.0, star_type=StarType.G),
        make_star(2, 3.0, 0.0, 0.0, mass=0.6, star_type=StarType.K),
    ]


@pytest.fixture
def fake_engine(scattered_stars):
    return FakeEngine(0, stars=scattered_stars)


@pytest.fixture
def fake_factory(scattered_stars):
    """Engine factory that remembers every engine it built."""
    built = []

    def factory(seed, config):
        engine = FakeEngine(seed, config, stars=scattered_stars)
        built.append(engine)
        return engine

    factory.built = built
    return factory


@pytest.fixture
def small_config():
    """Coarse structure grid so procedural tests stay fast."""
    return GeneratorConfig(structure_block_size=2000.0, structure_samples_per_block=16)


@pytest.fixture
def triple_system():
    """Hand-built hierarchical triple with planets, one belt and no Oort cloud."""
    configuration = HierarchicalTriple(inner_separation_au=0.2, outer_separation_au=600.0)
    primary = make_star(100, 10.0, 20.0, 30.0, mass=1.0, star_type=StarType.G)
    offsets = companion_offsets_au(configuration, None)
    stars = [
        primary,
        make_star(101, 10.0, 20.0, 30.0, mass=0.5, star_type=StarType.K),
        make_star(102, 10.01, 20.0, 30.0, mass=0.3, star_type=StarType.M),
    ]
    components = make_components(stars, configuration, offsets)
    home = components[0]
    home.inner_planets.append(Planet(
        planet_type=PlanetType.TERRESTRIAL,
        mass=1.0,
        position=Vec3(1.2, 0.0, 0.0),
        moons=[Moon(moon_type=MoonType.ROCKY, mass=1.0, position=Vec3(0.0, 384400.0, 0.0))],
    ))
    home.outer_planets.append(Planet(
        planet_type=PlanetType.GAS_GIANT,
        mass=318.0,
        position=Vec3(0.0, 6.0, 0.0),
    ))
    belt = AsteroidBelt(
        name="Main Belt",
        inner_radius=2.2,
        outer_radius=3.3,
        total_mass=0.0005,
        asteroid_count=3,
        largest_bodies=[Asteroid(
            asteroid_type=AsteroidType.CARBONACEOUS,
            mass=9.4e20,
            diameter=940.0,
            orbital_radius=2.77,
            position=Vec3(2.77, 0.0, 0.0),
        )],
    )
    return StarSystem(
        star_id=100,
        position=primary.position,
        stars=stars,
        configuration=configuration,
        stellar_components=components,
        inner_planets=list(home.inner_planets),
        outer_planets=list(home.outer_planets),
        asteroid_belts=[belt],
        oort_cloud=None,
        frost_line=home.frost_line,
        habitable_zone_inner=home.habitable_zone_inner,
        habitable_zone_outer=home.habitable_zone_outer,
    )


@pytest.fixture
def oort_cloud():
    return OortCloud(
        inner_radius=2000.0,
        outer_radius=50000.0,
        estimated_population=100_000_000_000,
        total_mass=5.0,
        notable_comets=[Comet(
            comet_type=CometType.LONG_PERIOD,
            mass=2.2e14,
            nucleus_diameter=11.0,
            orbital_radius=9000.0,
            eccentricity=0.995,
            position=Vec3(0.0, 0.0, 9000.0),
        )],
    )

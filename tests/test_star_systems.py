"""Tests for the star system builder."""

import numpy as np
import pytest

from core.types import Vec3
from galaxy.space_objects import (
    StarType, Single, CloseBinary, WideBinary, HierarchicalTriple, UnstableTriple,
)
from galaxy.star_ids import member_id
from galaxy.star_systems import (
    build_star_system, companion_offsets_au, make_companions, make_components,
    make_oort_cloud,
)

from conftest import make_star

PRIMARY_ID = 1234


def _build(seed, mass=1.0, star_type=StarType.G):
    primary = make_star(PRIMARY_ID, 100.0, 0.0, 0.0, mass=mass, star_type=star_type)
    rng = np.random.default_rng(seed)
    return build_star_system(PRIMARY_ID, primary, rng, lambda m: member_id(PRIMARY_ID, m))


@pytest.fixture(scope="module")
def many_systems():
    return [_build(seed, mass=0.5 + (seed % 7) * 0.4) for seed in range(200)]


class TestInvariants:

    def test_components_partition_stars(self, many_systems):
        for system in many_systems:
            indices = sorted(i for c in system.stellar_components for i in c.star_indices)
            assert indices == list(range(len(system.stars)))
            assert len(system.stars) == system.configuration.star_count

    def test_planets_split_by_frost_line(self, many_systems):
        for system in many_systems:
            for comp in system.stellar_components:
                assert all(p.orbital_radius < comp.frost_line for p in comp.inner_planets)
                assert all(p.orbital_radius >= comp.frost_line for p in comp.outer_planets)

    def test_planets_within_limits(self, many_systems):
        for system in many_systems:
            for comp in system.stellar_components:
                for p in comp.planets:
                    assert comp.planet_inner_limit * (1 - 1e-9) <= p.orbital_radius
                    assert p.orbital_radius <= comp.planet_outer_limit * (1 + 1e-9)

    def test_system_level_mirrors_primary_component(self, many_systems):
        for system in many_systems:
            home = system.stellar_components[0]
            assert 0 in home.star_indices
            assert system.inner_planets == home.inner_planets
            assert system.outer_planets == home.outer_planets
            assert system.frost_line == home.frost_line
            assert system.habitable_zone_inner == home.habitable_zone_inner

    def test_belts_bounded(self, many_systems):
        for system in many_systems:
            for belt in system.asteroid_belts:
                assert len(belt.largest_bodies) <= belt.asteroid_count
                assert belt.inner_radius < belt.outer_radius
                diameters = [a.diameter for a in belt.largest_bodies]
                assert diameters == sorted(diameters, reverse=True)

    def test_habitable_zone_ordered(self, many_systems):
        for system in many_systems:
            for comp in system.stellar_components:
                assert comp.habitable_zone_inner < comp.habitable_zone_outer

    def test_unstable_triples_have_no_oort_cloud(self, many_systems):
        for system in many_systems:
            if isinstance(system.configuration, UnstableTriple):
                assert system.oort_cloud is None

    def test_configurations_vary(self, many_systems):
        kinds = {type(s.configuration) for s in many_systems}
        assert Single in kinds
        assert len(kinds) >= 3

    def test_companion_ids(self, many_systems):
        for system in many_systems:
            for k, star in enumerate(system.stars):
                assert star.id == member_id(PRIMARY_ID, k)

    def test_same_rng_same_system(self):
        assert _build(17) == _build(17)


class TestComponents:

    def _stars(self, n):
        return [make_star(i, mass=m) for i, m in zip(range(n), (1.0, 0.6, 0.3))]

    def test_hierarchical_triple(self):
        config = HierarchicalTriple(inner_separation_au=0.2, outer_separation_au=500.0)
        stars = self._stars(3)
        comps = make_components(stars, config, companion_offsets_au(config, None))

        assert [c.star_indices for c in comps] == [[0, 1], [2]]
        assert comps[0].is_interacting
        assert comps[0].internal_separation == 0.2
        assert comps[0].planet_inner_limit >= 0.6
        assert comps[0].planet_outer_limit <= 500.0 / 3.0
        assert comps[0].combined_mass == pytest.approx(1.6)

    def test_unstable_triple_covers_all_stars(self):
        config = UnstableTriple()
        offsets = companion_offsets_au(config, np.random.default_rng(3))
        comps = make_components(self._stars(3), config, offsets)

        assert sorted(i for c in comps for i in c.star_indices) == [0, 1, 2]
        assert all(not c.is_interacting for c in comps)

    def test_wide_binary_barycentres(self):
        config = WideBinary(separation_au=300.0)
        comps = make_components(self._stars(2), config, companion_offsets_au(config, None))

        # barycentre of the pair sits at the origin
        m0, m1 = 1.0, 0.6
        weighted = m0 * comps[0].barycenter.x + m1 * comps[1].barycenter.x
        assert weighted == pytest.approx(0.0, abs=1e-9)
        assert comps[1].barycenter.x - comps[0].barycenter.x == pytest.approx(300.0)

    def test_close_binary_single_component(self):
        config = CloseBinary(separation_au=0.05)
        comps = make_components(self._stars(2), config, companion_offsets_au(config, None))
        assert len(comps) == 1
        assert comps[0].star_indices == [0, 1]

    def test_single_hz_scales_with_luminosity(self):
        comp = make_components([make_star(0, mass=1.0)], Single(), [Vec3()])[0]
        assert comp.frost_line == pytest.approx(2.7)
        assert comp.habitable_zone_inner == pytest.approx((1 / 1.1) ** 0.5)
        assert comp.habitable_zone_outer == pytest.approx((1 / 0.53) ** 0.5)


class TestCompanions:

    def test_companions_are_main_sequence(self):
        primary = make_star(PRIMARY_ID, mass=2.0, star_type=StarType.A)
        config = HierarchicalTriple()
        stars = make_companions(primary, companion_offsets_au(config, None),
                                np.random.default_rng(0), lambda m: member_id(PRIMARY_ID, m))

        assert len(stars) == 3
        for s in stars[1:]:
            assert 0.08 <= s.mass <= 2.0
            assert s.star_type in (StarType.O, StarType.B, StarType.A, StarType.F,
                                   StarType.G, StarType.K, StarType.M)


class TestOortCloud:

    def test_unstable_triple_never_has_cloud(self):
        comp = make_components([make_star(0)], Single(), [Vec3()])[0]
        for seed in range(20):
            assert make_oort_cloud(comp, UnstableTriple(), np.random.default_rng(seed)) is None

    def test_cloud_shape(self):
        comp = make_components([make_star(0)], Single(), [Vec3()])[0]
        clouds = [make_oort_cloud(comp, Single(), np.random.default_rng(s)) for s in range(20)]
        clouds = [c for c in clouds if c is not None]

        assert clouds
        for cloud in clouds:
            assert cloud.inner_radius < cloud.outer_radius
            assert 2 <= len(cloud.notable_comets) <= 6
            assert cloud.estimated_population > 0
            for comet in cloud.notable_comets:
                assert comet.position.norm() == pytest.approx(comet.orbital_radius)

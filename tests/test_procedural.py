"""Tests for the procedural reference engine."""

import numpy as np
import pytest

from core.types import Vec3
from galaxy.config import GeneratorConfig
from galaxy.engine import GalaxyModel
from galaxy.errors import UnknownStarError
from galaxy.procedural import (
    ProceduralEngine, hash_u64, hash_u64_array, u01_array, u01_from_u64,
    FIELD_BLOCK_LY,
)
from galaxy.space_objects import SystemQuery
from galaxy.star_ids import (
    KIND_FIELD, KIND_STRUCTURE, pack_star_id, unpack_star_id, member_id,
)

SUN = Vec3(26000.0, 0.0, 0.0)


class TestHashing:

    def test_array_hash_matches_scalar(self):
        xs = np.array([-3, -1, 0, 1, 65535, -70000], dtype=np.int64)
        hashed = hash_u64_array(42, 0xABC, xs, 7)

        for x, h in zip(xs.tolist(), hashed.tolist()):
            assert h == hash_u64(42, 0xABC, x, 7)

    def test_u01_matches_scalar(self):
        hashed = hash_u64_array(1, np.arange(20, dtype=np.int64))
        u = u01_array(hashed)

        assert np.all((u >= 0.0) & (u < 1.0))
        assert u.tolist() == [u01_from_u64(int(h)) for h in hashed.tolist()]


class TestGalaxyModel:

    def test_local_density_at_solar_radius(self):
        galaxy = GalaxyModel()
        assert galaxy.density(26000.0, 0.0, 0.0) == pytest.approx(0.004)

    def test_density_zero_outside_disk(self):
        assert GalaxyModel().density(60000.0, 0.0, 0.0) == 0.0

    def test_density_vectorised(self):
        rho = GalaxyModel().density(np.array([0.0, 26000.0]), np.zeros(2), np.zeros(2))
        assert rho.shape == (2,)
        assert rho[0] > rho[1]

    def test_total_stars_positive(self):
        assert GalaxyModel().total_stars() > 1e10


class TestNearby:

    def test_within_radius_and_sorted(self):
        engine = ProceduralEngine(42)
        stars = engine.get_nearby_stars(SUN, 15.0, 10_000)

        assert stars
        d = [s.position.distance_to(SUN) for s in stars]
        assert max(d) <= 15.0
        keys = [(dist, s.id) for dist, s in zip(d, stars)]
        assert keys == sorted(keys)

    def test_ids_unique(self):
        stars = ProceduralEngine(3).get_nearby_stars(SUN, 16.0, 10_000)
        ids = [s.id for s in stars]
        assert len(ids) == len(set(ids))

    def test_deterministic(self):
        a = ProceduralEngine(42).get_nearby_stars(SUN, 16.0, 10_000)
        b = ProceduralEngine(42).get_nearby_stars(SUN, 16.0, 10_000)
        assert a == b

    def test_seed_changes_field(self):
        a = ProceduralEngine(1).get_nearby_stars(SUN, 16.0, 10_000)
        b = ProceduralEngine(2).get_nearby_stars(SUN, 16.0, 10_000)
        assert [s.position for s in a] != [s.position for s in b]

    def test_cap_keeps_nearest(self):
        engine = ProceduralEngine(42)
        full = engine.get_nearby_stars(SUN, 16.0, 10_000)
        capped = engine.get_nearby_stars(SUN, 16.0, 5)
        assert capped == full[:5]

    def test_overlapping_queries_agree(self):
        """A star found from two centres has the same id and properties."""
        engine = ProceduralEngine(11)
        a = {s.id: s for s in engine.get_nearby_stars(SUN, 12.0, 10_000)}
        b = {s.id: s for s in engine.get_nearby_stars(Vec3(26005.0, 0.0, 0.0), 12.0, 10_000)}
        shared = set(a) & set(b)
        assert shared
        for sid in shared:
            assert a[sid] == b[sid]

    def test_empty_outside_galaxy(self):
        assert ProceduralEngine(0).get_nearby_stars(Vec3(80000.0, 0.0, 0.0), 10.0, 100) == []

    def test_field_ids_decode_to_block(self):
        star = ProceduralEngine(42).get_nearby_stars(SUN, 10.0, 1)[0]
        key = unpack_star_id(star.id)

        assert key.kind == KIND_FIELD
        assert key.member == 0
        assert key.ix == int(np.floor(star.position.x / FIELD_BLOCK_LY))
        assert key.iy == int(np.floor(star.position.y / FIELD_BLOCK_LY))
        assert key.iz == int(np.floor(star.position.z / FIELD_BLOCK_LY))


class TestStructure:

    def test_cap_and_order(self, small_config):
        stars = ProceduralEngine(42, small_config).get_galactic_structure(100)

        assert len(stars) == 100
        lum = [s.luminosity for s in stars]
        assert all(a >= b * (1 - 1e-9) for a, b in zip(lum, lum[1:]))
        assert len({s.id for s in stars}) == 100

    def test_structure_ids(self, small_config):
        stars = ProceduralEngine(42, small_config).get_galactic_structure(20)
        for s in stars:
            assert unpack_star_id(s.id).kind == KIND_STRUCTURE

    def test_deterministic(self, small_config):
        a = ProceduralEngine(5, small_config).get_galactic_structure(50)
        b = ProceduralEngine(5, small_config).get_galactic_structure(50)
        assert a == b

    def test_inside_disk(self, small_config):
        engine = ProceduralEngine(8, small_config)
        for s in engine.get_galactic_structure(200):
            assert abs(s.position.z) <= 3.0 * engine.galaxy.scale_height + 2000.0
            assert np.hypot(s.position.x, s.position.y) <= engine.galaxy.radius + 3000.0

    def test_zero_cap(self, small_config):
        assert ProceduralEngine(1, small_config).get_galactic_structure(0) == []

    def test_zero_samples_per_block(self):
        config = GeneratorConfig(structure_block_size=2000.0, structure_samples_per_block=0)
        assert ProceduralEngine(1, config).get_galactic_structure(10) == []

    def test_block_size_coarsened(self, capsys):
        engine = ProceduralEngine(1, GeneratorConfig(structure_block_size=1.0))
        assert engine.structure_block_size > 1.0
        assert "Warning" in capsys.readouterr().out


class TestEstimate:

    def test_estimate_is_galaxy_scale(self):
        estimate = ProceduralEngine(0).estimate_total_stars(500.0)
        total = GalaxyModel().total_stars()
        assert 0.5 * total < estimate < 2.0 * total

    def test_estimate_deterministic(self):
        assert (ProceduralEngine(0).estimate_total_stars(500.0)
                == ProceduralEngine(99).estimate_total_stars(500.0))

    def test_non_positive_radius(self):
        assert ProceduralEngine(0).estimate_total_stars(0.0) == 0.0
        assert ProceduralEngine(0).estimate_total_stars(-10.0) == 0.0


class TestStarSystems:

    def test_field_star_system(self):
        engine = ProceduralEngine(42)
        star = engine.get_nearby_stars(SUN, 10.0, 1)[0]

        system = engine.get_star_system(SystemQuery(star.id))

        assert system.star_id == star.id
        assert system.stars[0] == star
        assert system.position == star.position

    def test_structure_star_system(self, small_config):
        engine = ProceduralEngine(42, small_config)
        star = engine.get_galactic_structure(1)[0]

        system = engine.get_star_system(SystemQuery(star.id))

        assert system.stars[0] == star

    def test_system_deterministic(self):
        engine = ProceduralEngine(42)
        star = engine.get_nearby_stars(SUN, 10.0, 1)[0]
        a = engine.get_star_system(SystemQuery(star.id))
        b = ProceduralEngine(42).get_star_system(SystemQuery(star.id))
        assert a == b

    @staticmethod
    def _first_system(engine, star_count):
        """First system in the seed-42 galactic-centre listing matching `star_count`."""
        for star in engine.get_nearby_stars(Vec3(0.0, 0.0, 0.0), 16.0, 10_000):
            system = engine.get_star_system(SystemQuery(star.id))
            if star_count(len(system.stars)):
                return system
        raise AssertionError("no matching system in the listing")

    def test_companions_resolve(self):
        engine = ProceduralEngine(42)
        system = self._first_system(engine, lambda n: n > 1)
        companion = system.stars[1]

        assert companion.id == member_id(system.star_id, 1)
        again = engine.get_star_system(SystemQuery(companion.id))
        assert again.star_id == companion.id
        assert again.stars == system.stars

    def test_missing_companion(self):
        engine = ProceduralEngine(42)
        system = self._first_system(engine, lambda n: n == 1)

        with pytest.raises(UnknownStarError):
            engine.get_star_system(SystemQuery(member_id(system.star_id, 2)))

    @pytest.mark.parametrize("star_id", [
        -1,
        1 << 63,
        1 << 59,
        3 << 60,
        pack_star_id(KIND_FIELD, 2600, 0, 0, 255),
        pack_star_id(KIND_FIELD, 9000, 0, 0, 0),
    ])
    def test_unknown_ids(self, star_id):
        with pytest.raises(UnknownStarError):
            ProceduralEngine(42).get_star_system(SystemQuery(star_id))

    def test_structure_block_outside_disk(self, small_config):
        star_id = pack_star_id(KIND_STRUCTURE, 0, 0, 40, 0)
        with pytest.raises(UnknownStarError):
            ProceduralEngine(42, small_config).get_star_system(SystemQuery(star_id))

    def test_position_hint_mismatch_is_reported(self, capsys):
        engine = ProceduralEngine(42)
        star = engine.get_nearby_stars(SUN, 10.0, 1)[0]

        system = engine.get_star_system(SystemQuery(star.id, position=Vec3(0.0, 0.0, 0.0)))

        assert system.stars[0] == star
        assert "does not match" in capsys.readouterr().out

    def test_position_hint_match_is_silent(self, capsys):
        engine = ProceduralEngine(42)
        star = engine.get_nearby_stars(SUN, 10.0, 1)[0]
        capsys.readouterr()

        engine.get_star_system(SystemQuery(star.id, position=star.position))

        assert "does not match" not in capsys.readouterr().out

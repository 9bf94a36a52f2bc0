"""
Procedural Generation Engine
Deterministic galaxy: every star and system is a pure function of
(seed, config, id). Nothing is stored; blocks are regenerated on demand.

Two star populations share the id space (see star_ids.py):

  field stars       — 10 ly cubic blocks, Poisson count from the block-centre
                      density, one numpy Generator per block
  structure samples — coarse blocks of `structure_block_size` ly, up to
                      `structure_samples_per_block` representative stars per
                      block, drawn with vectorised counter hashing so the whole
                      disk can be sampled in a single pass
"""

from __future__ import annotations
from dataclasses import dataclass
from functools import cached_property
from typing import List

import numpy as np

from core.coords import block_range, distances_from
from core.types import Vec3
from .engine import GenerationEngine, U64_MASK
from .errors import UnknownStarError
from .space_objects import (
    Star, StarType, StarSystem, SystemQuery, mass_range, luminosity_array,
)
from .star_ids import (
    KIND_FIELD, KIND_STRUCTURE, MAX_INDEX, MAX_BLOCK_INDEX,
    block_in_range, pack_star_id, pack_star_ids, unpack_star_id,
    primary_id, member_id,
)
from .star_systems import build_star_system


# ---------------------------------------------------------------------------
# Deterministic RNG utilities
# ---------------------------------------------------------------------------

def splitmix64(x: int) -> int:
    x = (x + 0x9E3779B97F4A7C15) & U64_MASK
    z = x
    z = (z ^ (z >> 30)) * 0xBF58476D1CE4E5B9 & U64_MASK
    z = (z ^ (z >> 27)) * 0x94D049BB133111EB & U64_MASK
    return (z ^ (z >> 31)) & U64_MASK

def u01_from_u64(u: int) -> float:
    return (u >> 11) * (1.0 / (1 << 53))

def hash_u64(*vals: int) -> int:
    x = 0xA5A5A5A5A5A5A5A5
    for v in vals:
        x ^= (v & U64_MASK)
        x = splitmix64(x)
    return x

def rng_from_seed(seed_u64: int) -> np.random.Generator:
    return np.random.default_rng(np.uint64(seed_u64))


# Same functions over uint64 arrays (wrap-around arithmetic)
_GOLDEN = np.uint64(0x9E3779B97F4A7C15)
_MIX1 = np.uint64(0xBF58476D1CE4E5B9)
_MIX2 = np.uint64(0x94D049BB133111EB)

def splitmix64_array(x: np.ndarray) -> np.ndarray:
    with np.errstate(over="ignore"):
        z = x + _GOLDEN
        z = (z ^ (z >> np.uint64(30))) * _MIX1
        z = (z ^ (z >> np.uint64(27))) * _MIX2
        return z ^ (z >> np.uint64(31))

def _as_u64(v) -> np.ndarray:
    if isinstance(v, np.ndarray):
        return v.astype(np.int64).view(np.uint64)
    return np.uint64(int(v) & U64_MASK)

def hash_u64_array(*vals) -> np.ndarray:
    """Element-wise hash_u64; ints broadcast against arrays."""
    x = np.uint64(0xA5A5A5A5A5A5A5A5)
    for v in vals:
        x = splitmix64_array(x ^ _as_u64(v))
    return np.atleast_1d(x)

def u01_array(u: np.ndarray) -> np.ndarray:
    return (u >> np.uint64(11)).astype(np.float64) * (1.0 / (1 << 53))


# ---------------------------------------------------------------------------
# Population
# ---------------------------------------------------------------------------

FIELD_BLOCK_LY = 10.0
MAX_STRUCTURE_BLOCKS = 4_000_000
STRUCTURE_DISK_HEIGHTS = 3.0          # vertical extent sampled, in scale heights
ESTIMATE_GRID_POINTS = 17             # per axis
POSITION_HINT_TOLERANCE_LY = 1.0

FIELD_TAG = 0xF1E1D
STRUCTURE_TAG = 0x57AC7
SYSTEM_TAG = 0x5757E

# Relative abundance of each type in the local field
_FIELD_IMF = [
    (StarType.M,            76.0),
    (StarType.K,            12.0),
    (StarType.G,             7.6),
    (StarType.F,             3.0),
    (StarType.A,             0.6),
    (StarType.B,             0.13),
    (StarType.O,             0.00003),
    (StarType.WHITE_DWARF,   6.0),
    (StarType.RED_GIANT,     0.4),
    (StarType.NEUTRON_STAR,  0.1),
    (StarType.BLACK_HOLE,    0.01),
]
_IMF_TYPES = [st for st, _ in _FIELD_IMF]
_IMF_CDF = np.cumsum([w for _, w in _FIELD_IMF]) / sum(w for _, w in _FIELD_IMF)
_IMF_MASS_LO = np.array([mass_range(st)[0] for st in _IMF_TYPES])
_IMF_MASS_HI = np.array([mass_range(st)[1] for st in _IMF_TYPES])


def _imf_index(u):
    return np.minimum(np.searchsorted(_IMF_CDF, u, side="right"), len(_IMF_TYPES) - 1)


@dataclass
class _StructureSamples:
    ids:       np.ndarray   # int64
    positions: np.ndarray   # (N,3) float64, ly
    type_idx:  np.ndarray   # index into _IMF_TYPES
    masses:    np.ndarray   # float64

    def star(self, i: int) -> Star:
        return Star(
            id=int(self.ids[i]),
            position=Vec3.of(*self.positions[i]),
            mass=float(self.masses[i]),
            star_type=_IMF_TYPES[int(self.type_idx[i])],
        )


class ProceduralEngine(GenerationEngine):
    """Reference generation engine over the GalaxyModel density."""

    # ------------------------------------------------------------------
    # Field stars
    # ------------------------------------------------------------------

    def _field_block(self, ix: int, iy: int, iz: int) -> List[Star]:
        if not block_in_range(ix, iy, iz):
            return []
        b = FIELD_BLOCK_LY
        rho = self.galaxy.density((ix + 0.5) * b, (iy + 0.5) * b, (iz + 0.5) * b)
        if rho <= 0.0:
            return []

        rng = rng_from_seed(hash_u64(self.seed_u64, FIELD_TAG, ix, iy, iz))
        n = min(int(rng.poisson(rho * b ** 3)), MAX_INDEX + 1)
        stars = []
        for k in range(n):
            x = (ix + rng.random()) * b
            y = (iy + rng.random()) * b
            z = (iz + rng.random()) * b
            st = _IMF_TYPES[int(_imf_index(rng.random()))]
            lo, hi = mass_range(st)
            stars.append(Star(
                id=pack_star_id(KIND_FIELD, ix, iy, iz, k),
                position=Vec3(x, y, z),
                mass=float(rng.uniform(lo, hi)),
                star_type=st,
            ))
        return stars

    def get_nearby_stars(self, position: Vec3, radius: float, max_stars: int) -> List[Star]:
        if radius <= 0.0 or max_stars <= 0:
            return []
        b = FIELD_BLOCK_LY
        found: List[Star] = []
        for ix in block_range(position.x - radius, position.x + radius, b):
            for iy in block_range(position.y - radius, position.y + radius, b):
                for iz in block_range(position.z - radius, position.z + radius, b):
                    found.extend(self._field_block(ix, iy, iz))
        if not found:
            return []

        pts = np.array([s.position.as_tuple() for s in found], dtype=np.float64)
        ids = np.array([s.id for s in found], dtype=np.int64)
        dist = distances_from(pts, position.as_tuple())
        inside = np.nonzero(dist <= radius)[0]
        order = inside[np.lexsort((ids[inside], dist[inside]))]
        return [found[i] for i in order[:max_stars]]

    # ------------------------------------------------------------------
    # Structure samples
    # ------------------------------------------------------------------

    @cached_property
    def structure_block_size(self) -> float:
        """
        Configured block size, doubled until the disk fits in
        MAX_STRUCTURE_BLOCKS blocks and in the id's block range.
        """
        b = float(self.config.structure_block_size)
        r = self.galaxy.radius
        zmax = STRUCTURE_DISK_HEIGHTS * self.galaxy.scale_height
        while True:
            nxy = len(block_range(-r, r, b))
            nz = len(block_range(-zmax, zmax, b))
            if nxy * nxy * nz <= MAX_STRUCTURE_BLOCKS and r / b < MAX_BLOCK_INDEX:
                break
            b *= 2.0
        if b != self.config.structure_block_size:
            print(f"Warning: structure_block_size {self.config.structure_block_size} ly "
                  f"too fine for the disk, sampling with {b} ly blocks")
        return b

    def _structure_index_ranges(self):
        b = self.structure_block_size
        r = self.galaxy.radius
        zmax = STRUCTURE_DISK_HEIGHTS * self.galaxy.scale_height
        return block_range(-r, r, b), block_range(-zmax, zmax, b)

    def _structure_samples(self, ix: np.ndarray, iy: np.ndarray,
                           iz: np.ndarray) -> _StructureSamples:
        """All representative stars of the given blocks."""
        b = self.structure_block_size
        s = self.config.structure_samples_per_block
        rho = self.galaxy.density((ix + 0.5) * b, (iy + 0.5) * b, (iz + 0.5) * b)
        rho = np.atleast_1d(rho)
        u = u01_array(hash_u64_array(self.seed_u64, STRUCTURE_TAG, ix, iy, iz))
        n = np.floor(s * rho / self.galaxy.central_density + u).astype(np.int64)
        n = np.where(rho > 0.0, np.minimum(n, s), 0)

        total = int(n.sum())
        start = np.cumsum(n) - n
        k = np.arange(total, dtype=np.int64) - np.repeat(start, n)
        bx, by, bz = np.repeat(ix, n), np.repeat(iy, n), np.repeat(iz, n)

        h = hash_u64_array(self.seed_u64, STRUCTURE_TAG, bx, by, bz, k)

        def draw(salt):
            return u01_array(splitmix64_array(h ^ np.uint64(salt)))

        positions = np.column_stack((
            (bx + draw(1)) * b,
            (by + draw(2)) * b,
            (bz + draw(3)) * b,
        ))
        type_idx = _imf_index(draw(4))
        masses = _IMF_MASS_LO[type_idx] + (_IMF_MASS_HI[type_idx] - _IMF_MASS_LO[type_idx]) * draw(5)
        return _StructureSamples(
            ids=pack_star_ids(KIND_STRUCTURE, bx, by, bz, k),
            positions=positions,
            type_idx=type_idx,
            masses=masses,
        )

    @cached_property
    def _structure_table(self):
        """(samples, brightness order) over the whole disk; built on first use."""
        xy, zs = self._structure_index_ranges()
        gx, gy, gz = np.meshgrid(np.arange(xy.start, xy.stop), np.arange(xy.start, xy.stop),
                                 np.arange(zs.start, zs.stop), indexing="ij")
        samples = self._structure_samples(gx.ravel(), gy.ravel(), gz.ravel())
        lum = luminosity_array([_IMF_TYPES[i] for i in samples.type_idx], samples.masses)
        order = np.lexsort((samples.ids, -lum))
        return samples, order

    def get_galactic_structure(self, max_stars: int) -> List[Star]:
        if max_stars <= 0 or self.config.structure_samples_per_block == 0:
            return []
        samples, order = self._structure_table
        return [samples.star(int(i)) for i in order[:max_stars]]

    def estimate_total_stars(self, reference_radius: float) -> float:
        r = float(reference_radius)
        if not r > 0.0:
            return 0.0
        g = np.linspace(-r, r, ESTIMATE_GRID_POINTS)
        gx, gy, gz = np.meshgrid(g, g, g, indexing="ij")
        inside = gx * gx + gy * gy + gz * gz <= r * r
        sun = self.galaxy.solar_position
        rho = self.galaxy.density(sun.x + gx[inside], sun.y + gy[inside], sun.z + gz[inside])
        mean = float(np.mean(rho))
        return max(0.0, mean * self.galaxy.effective_volume())

    # ------------------------------------------------------------------
    # Systems
    # ------------------------------------------------------------------

    def _resolve_primary(self, star_id: int) -> Star:
        key = unpack_star_id(star_id)
        if key.kind == KIND_FIELD:
            stars = self._field_block(key.ix, key.iy, key.iz)
            if key.index >= len(stars):
                raise UnknownStarError(star_id, "no such field star")
            return stars[key.index]

        xy, zs = self._structure_index_ranges()
        if key.ix not in xy or key.iy not in xy or key.iz not in zs:
            raise UnknownStarError(star_id, "block outside the sampled disk")
        ix, iy, iz = (np.array([v], dtype=np.int64) for v in (key.ix, key.iy, key.iz))
        samples = self._structure_samples(ix, iy, iz)
        if key.index >= len(samples.ids):
            raise UnknownStarError(star_id, "no such structure sample")
        return samples.star(key.index)

    def get_star_system(self, query: SystemQuery) -> StarSystem:
        """
        Decode the id, rebuild its primary and generate the system.
        The position hint is never used for lookup; a hint that disagrees
        with the decoded star is reported and otherwise ignored.
        """
        key = unpack_star_id(query.star_id)
        primary = self._resolve_primary(primary_id(query.star_id))
        rng = rng_from_seed(hash_u64(self.seed_u64, SYSTEM_TAG, primary.id))
        system = build_star_system(int(query.star_id), primary, rng,
                                   lambda m: member_id(primary.id, m))
        if key.member >= len(system.stars):
            raise UnknownStarError(query.star_id, f"system has no member {key.member}")

        if query.position is not None:
            actual = system.stars[key.member].position
            if query.position.distance_to(actual) > POSITION_HINT_TOLERANCE_LY:
                print(f"Warning: position hint {query.position.as_tuple()} does not match "
                      f"star {query.star_id} at {actual.as_tuple()}")
        return system

"""
Galaxy session: the caller-facing entry point.

Holds the seed and the generator configuration, and the binding to the
current engine. The binding is a single value, either Unbound() or
Bound(engine); any change of seed or configuration builds a new config,
a new engine and a new Bound in one step, so no query ever sees a
half-updated state.

Queries on an unbound session never raise: they return empty results,
set `last_diagnostic` and print a warning.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from core.types import Vec3
from .columnar import ColumnarStars, to_columns
from .config import GeneratorConfig
from .engine import GenerationEngine
from .procedural import ProceduralEngine
from .projection import project_system, summarize_system
from .query import SpatialQueryService

DEFAULT_SEED = 0
DEFAULT_NEARBY_MAX_STARS = 10_000
NOT_INITIALIZED = "engine not initialized"

EngineFactory = Callable[[int, GeneratorConfig], GenerationEngine]

_I64_MIN = -(1 << 63)
_I64_MAX = (1 << 63) - 1


@dataclass(frozen=True)
class Unbound:
    pass


@dataclass(frozen=True)
class Bound:
    engine: GenerationEngine


Binding = Union[Unbound, Bound]


def _default_factory(seed: int, config: GeneratorConfig) -> GenerationEngine:
    return ProceduralEngine.new_with_config(seed, config)


class GalaxySession:
    def __init__(self, seed: int = DEFAULT_SEED, config: Optional[GeneratorConfig] = None,
                 engine_factory: Optional[EngineFactory] = None):
        self._seed = self._check_seed(seed)
        self._config = config if config is not None else GeneratorConfig()
        self._factory = engine_factory or _default_factory
        self._binding: Binding = Unbound()
        self.last_diagnostic: Optional[str] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @staticmethod
    def _check_seed(seed: int) -> int:
        if isinstance(seed, bool) or not isinstance(seed, int):
            raise TypeError(f"seed must be an int, got {type(seed).__name__}")
        if not _I64_MIN <= seed <= _I64_MAX:
            raise ValueError(f"seed {seed} does not fit in a signed 64-bit integer")
        return seed

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    @property
    def binding(self) -> Binding:
        return self._binding

    @property
    def is_bound(self) -> bool:
        return isinstance(self._binding, Bound)

    def _rebind(self, seed: int, config: GeneratorConfig) -> None:
        # build first: a failing factory leaves the old binding in place
        engine = self._factory(seed, config)
        self._seed, self._config, self._binding = seed, config, Bound(engine)
        self.last_diagnostic = None

    def bind(self) -> None:
        """Bind an engine for the current seed and config."""
        self._rebind(self._seed, self._config)
        print(f"Galaxy ready (seed={self._seed}, radius={self.get_galaxy_radius():.0f} ly)")

    def set_seed(self, seed: int) -> None:
        self._rebind(self._check_seed(seed), self._config)
        print(f"Seed changed to {seed}")

    def load_config(self, path: str | Path) -> GeneratorConfig:
        """
        Replace the configuration with the contents of `path`.

        Raises:
            ConfigError: on any load or validation failure; the current
                         configuration and engine are kept
        """
        config = GeneratorConfig.load_from_file(path)
        self._rebind(self._seed, config)
        print(f"Loaded generator config from {path}")
        return config

    def set_nearby_max_radius(self, radius: float) -> None:
        self._rebind(self._seed, self._config.with_changes(nearby_max_radius=radius))
        print(f"nearby_max_radius set to {self._config.nearby_max_radius:g} ly")

    def get_nearby_max_radius(self) -> float:
        return self._config.nearby_max_radius

    def set_structure_block_size(self, size: float) -> None:
        self._rebind(self._seed, self._config.with_changes(structure_block_size=size))
        print(f"structure_block_size set to {self._config.structure_block_size:g} ly")

    def set_structure_samples_per_block(self, samples: int) -> None:
        self._rebind(self._seed, self._config.with_changes(structure_samples_per_block=samples))
        print(f"structure_samples_per_block set to {self._config.structure_samples_per_block}")

    def get_galaxy_radius(self) -> float:
        if isinstance(self._binding, Bound):
            return float(self._binding.engine.galaxy.radius)
        return 0.0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _service(self) -> Optional[SpatialQueryService]:
        if isinstance(self._binding, Bound):
            self.last_diagnostic = None
            return SpatialQueryService(self._binding.engine)
        self.last_diagnostic = NOT_INITIALIZED
        print(f"Warning: {NOT_INITIALIZED}, returning empty result")
        return None

    def get_structure(self, max_stars: int) -> ColumnarStars:
        service = self._service()
        if service is None:
            return ColumnarStars.empty(diagnostic=NOT_INITIALIZED)
        result = service.get_structure(max_stars)
        print(f"Galactic structure: {result.count:,} stars "
              f"(cap {result.max_stars:,}, estimated total {result.estimated_total_stars:,})")
        out = to_columns(result.stars, estimated_total_stars=result.estimated_total_stars)
        out.metadata.update({
            "requested_max_stars": result.requested_max_stars,
            "max_stars": result.max_stars,
        })
        return out

    def get_nearby_stars(self, x: float, y: float, z: float, radius: float,
                         max_stars: int = DEFAULT_NEARBY_MAX_STARS) -> ColumnarStars:
        service = self._service()
        if service is None:
            return ColumnarStars.empty(diagnostic=NOT_INITIALIZED)
        result = service.get_nearby_stars(Vec3.of(x, y, z), radius, max_stars)
        out = to_columns(result.stars)
        out.metadata.update({
            "requested_radius": result.requested_radius,
            "radius": result.radius,
            "radius_clamped": result.radius_clamped,
            "requested_max_stars": result.requested_max_stars,
            "max_stars": result.max_stars,
        })
        return out

    def get_star_system(self, star_id: int, position: Optional[Vec3] = None) -> Dict[str, Any]:
        """
        Nested description of one system, or {} when unbound.

        Raises:
            UnknownStarError: star_id does not resolve under the current seed/config
        """
        service = self._service()
        if service is None:
            return {}
        system = service.get_star_system(star_id, position)
        counts = summarize_system(system)
        print(f"System {star_id}: {counts['stars']} star(s), {counts['planets']} planets, "
              f"{counts['moons']} moons, {counts['asteroid_belts']} belts")
        return project_system(system)

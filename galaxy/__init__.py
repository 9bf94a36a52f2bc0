"""
Galaxy module — procedural galaxy queries and projections.

Usage:
    from galaxy import GalaxySession
    session = GalaxySession()
    session.set_seed(42)                 # binds a fresh engine

    # Listings (columnar, index-aligned)
    structure = session.get_structure(max_stars=50_000)
    nearby = session.get_nearby_stars(26000.0, 0.0, 0.0, radius=16.0)

    # One system as a nested dict
    system = session.get_star_system(int(nearby.ids[0]))
"""

from .errors import (
    GalaxyError,
    ConfigError,
    UnknownStarError,
    UnmappedVariantError,
)
from .space_objects import (
    Star,
    StarType,
    StellarConfiguration,
    Single,
    CloseBinary,
    WideBinary,
    HierarchicalTriple,
    UnstableTriple,
    StellarComponent,
    Planet,
    PlanetType,
    Moon,
    MoonType,
    AsteroidBelt,
    Asteroid,
    AsteroidType,
    OortCloud,
    Comet,
    CometType,
    StarSystem,
    SystemQuery,
)
from .config import GeneratorConfig
from .engine import GenerationEngine, GalaxyModel
from .procedural import ProceduralEngine
from .query import SpatialQueryService, StructureResult, NearbyResult
from .columnar import ColumnarStars, to_columns
from .projection import project_system, summarize_system
from .session import GalaxySession, Bound, Unbound

__all__ = [
    "GalaxyError",
    "ConfigError",
    "UnknownStarError",
    "UnmappedVariantError",
    "Star",
    "StarType",
    "StellarConfiguration",
    "Single",
    "CloseBinary",
    "WideBinary",
    "HierarchicalTriple",
    "UnstableTriple",
    "StellarComponent",
    "Planet",
    "PlanetType",
    "Moon",
    "MoonType",
    "AsteroidBelt",
    "Asteroid",
    "AsteroidType",
    "OortCloud",
    "Comet",
    "CometType",
    "StarSystem",
    "SystemQuery",
    "GeneratorConfig",
    "GenerationEngine",
    "GalaxyModel",
    "ProceduralEngine",
    "SpatialQueryService",
    "StructureResult",
    "NearbyResult",
    "ColumnarStars",
    "to_columns",
    "project_system",
    "summarize_system",
    "GalaxySession",
    "Bound",
    "Unbound",
]

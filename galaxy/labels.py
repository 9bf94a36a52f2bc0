"""
Canonical labels for every enumerated type exposed to callers.

Each table must cover its enum completely. `_check_total` runs at import
time, so adding a member to an enum without a label makes the package fail
to import instead of emitting an "unknown" label downstream.
"""

from __future__ import annotations
from enum import Enum
from typing import Dict, Type

from .errors import UnmappedVariantError
from .space_objects import (
    StarType, PlanetType, MoonType, AsteroidType, CometType,
    StellarConfiguration, Single, CloseBinary, WideBinary,
    HierarchicalTriple, UnstableTriple,
)


STAR_TYPE_LABELS: Dict[StarType, str] = {
    StarType.O:            "O",
    StarType.B:            "B",
    StarType.A:            "A",
    StarType.F:            "F",
    StarType.G:            "G",
    StarType.K:            "K",
    StarType.M:            "M",
    StarType.RED_GIANT:    "RedGiant",
    StarType.WHITE_DWARF:  "WhiteDwarf",
    StarType.NEUTRON_STAR: "NeutronStar",
    StarType.BLACK_HOLE:   "BlackHole",
}

PLANET_TYPE_LABELS: Dict[PlanetType, str] = {
    PlanetType.DWARF:        "Dwarf",
    PlanetType.TERRESTRIAL:  "Terrestrial",
    PlanetType.SUPER_EARTH:  "SuperEarth",
    PlanetType.DESERT:       "Desert",
    PlanetType.OCEAN:        "Ocean",
    PlanetType.LAVA:         "Lava",
    PlanetType.MINI_NEPTUNE: "MiniNeptune",
    PlanetType.SUB_NEPTUNE:  "SubNeptune",
    PlanetType.ICE_GIANT:    "IceGiant",
    PlanetType.GAS_GIANT:    "GasGiant",
    PlanetType.HOT_JUPITER:  "HotJupiter",
    PlanetType.CHTHONIAN:    "Chthonian",
    PlanetType.CARBON:       "Carbon",
    PlanetType.CORELESS:     "Coreless",
}

MOON_TYPE_LABELS: Dict[MoonType, str] = {
    MoonType.ROCKY:       "Rocky",
    MoonType.ICY:         "Icy",
    MoonType.ICE_ROCK:    "IceRock",
    MoonType.OCEAN:       "Ocean",
    MoonType.VOLCANIC:    "Volcanic",
    MoonType.CAPTURED:    "Captured",
    MoonType.ATMOSPHERIC: "Atmospheric",
}

ASTEROID_TYPE_LABELS: Dict[AsteroidType, str] = {
    AsteroidType.CARBONACEOUS: "Carbonaceous",
    AsteroidType.SILICATE:     "Silicate",
    AsteroidType.METALLIC:     "Metallic",
}

COMET_TYPE_LABELS: Dict[CometType, str] = {
    CometType.SHORT_PERIOD: "ShortPeriod",
    CometType.LONG_PERIOD:  "LongPeriod",
    CometType.HYPERBOLIC:   "Hyperbolic",
}

CONFIGURATION_LABELS: Dict[Type[StellarConfiguration], str] = {
    Single:             "Single",
    CloseBinary:        "CloseBinary",
    WideBinary:         "WideBinary",
    HierarchicalTriple: "HierarchicalTriple",
    UnstableTriple:     "UnstableTriple",
}


def _check_total(table: Dict[Enum, str], enum_cls: Type[Enum]) -> None:
    missing = [m.name for m in enum_cls if m not in table]
    if missing:
        raise UnmappedVariantError(
            f"{enum_cls.__name__} members without a label: {', '.join(missing)}"
        )


def _check_configurations() -> None:
    variants = set(StellarConfiguration.__subclasses__())
    missing = sorted(c.__name__ for c in variants - set(CONFIGURATION_LABELS))
    if missing:
        raise UnmappedVariantError(
            f"StellarConfiguration variants without a label: {', '.join(missing)}"
        )


_check_total(STAR_TYPE_LABELS, StarType)
_check_total(PLANET_TYPE_LABELS, PlanetType)
_check_total(MOON_TYPE_LABELS, MoonType)
_check_total(ASTEROID_TYPE_LABELS, AsteroidType)
_check_total(COMET_TYPE_LABELS, CometType)
_check_configurations()


def _lookup(table: Dict, key, kind: str) -> str:
    try:
        return table[key]
    except KeyError:
        raise UnmappedVariantError(f"No {kind} label for {key!r}") from None


def star_type_label(star_type: StarType) -> str:
    return _lookup(STAR_TYPE_LABELS, star_type, "star type")


def planet_type_label(planet_type: PlanetType) -> str:
    return _lookup(PLANET_TYPE_LABELS, planet_type, "planet type")


def moon_type_label(moon_type: MoonType) -> str:
    return _lookup(MOON_TYPE_LABELS, moon_type, "moon type")


def asteroid_type_label(asteroid_type: AsteroidType) -> str:
    return _lookup(ASTEROID_TYPE_LABELS, asteroid_type, "asteroid type")


def comet_type_label(comet_type: CometType) -> str:
    return _lookup(COMET_TYPE_LABELS, comet_type, "comet type")


def configuration_label(configuration: StellarConfiguration) -> str:
    # exact type: a subclass of a variant is not the variant
    return _lookup(CONFIGURATION_LABELS, type(configuration), "configuration")

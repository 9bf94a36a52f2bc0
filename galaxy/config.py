"""
Generator configuration.

Three tuning parameters drive the query layer:

  nearby_max_radius            — hard cap (ly) for nearby-star queries
  structure_block_size         — edge (ly) of the blocks sampled by the
                                 galactic structure query
  structure_samples_per_block  — max representative stars per block

Configuration files are TOML or JSON, chosen by suffix. Keys may sit at the
top level or inside a `generator` table:

    [generator]
    nearby_max_radius = 16.0
    structure_block_size = 1000.0
    structure_samples_per_block = 4

Loading never falls back to defaults on error: a missing file, a parse
failure, an unknown key or an invalid value raises ConfigError.
"""

from __future__ import annotations
import json
import math
import tomllib
from dataclasses import dataclass, asdict, fields, replace
from pathlib import Path
from typing import Any, Dict

from .errors import ConfigError


DEFAULT_NEARBY_MAX_RADIUS = 16.0
DEFAULT_STRUCTURE_BLOCK_SIZE = 1000.0
DEFAULT_STRUCTURE_SAMPLES_PER_BLOCK = 4

# Limits imposed by the star id layout (see procedural.py)
MIN_STRUCTURE_BLOCK_SIZE = 1.0
MAX_STRUCTURE_SAMPLES_PER_BLOCK = 255


@dataclass(frozen=True)
class GeneratorConfig:
    nearby_max_radius:           float = DEFAULT_NEARBY_MAX_RADIUS
    structure_block_size:        float = DEFAULT_STRUCTURE_BLOCK_SIZE
    structure_samples_per_block: int = DEFAULT_STRUCTURE_SAMPLES_PER_BLOCK

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        r = self.nearby_max_radius
        if isinstance(r, bool) or not isinstance(r, (int, float)) or not math.isfinite(r) or r <= 0:
            raise ConfigError(f"nearby_max_radius must be a positive number, got {r!r}")
        b = self.structure_block_size
        if (isinstance(b, bool) or not isinstance(b, (int, float)) or not math.isfinite(b)
                or b < MIN_STRUCTURE_BLOCK_SIZE):
            raise ConfigError(
                f"structure_block_size must be >= {MIN_STRUCTURE_BLOCK_SIZE} ly, got {b!r}"
            )
        s = self.structure_samples_per_block
        if (isinstance(s, bool) or not isinstance(s, int)
                or not 0 <= s <= MAX_STRUCTURE_SAMPLES_PER_BLOCK):
            raise ConfigError(
                "structure_samples_per_block must be an integer in "
                f"[0, {MAX_STRUCTURE_SAMPLES_PER_BLOCK}], got {s!r}"
            )

    def with_changes(self, **changes: Any) -> GeneratorConfig:
        """New validated config; self is left untouched."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: str | None = None) -> GeneratorConfig:
        if "generator" in data and isinstance(data["generator"], dict):
            data = data["generator"]
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"unknown configuration keys: {', '.join(unknown)}", source)
        values = dict(data)
        # TOML/JSON integers are fine for the float fields
        for key in ("nearby_max_radius", "structure_block_size"):
            if key in values and isinstance(values[key], int) and not isinstance(values[key], bool):
                values[key] = float(values[key])
        try:
            return cls(**values)
        except ConfigError as exc:
            raise ConfigError(str(exc), source) from None

    @classmethod
    def load_from_file(cls, path: str | Path) -> GeneratorConfig:
        """
        Load a configuration from a .toml or .json file.

        Raises:
            ConfigError: file missing/unreadable, unsupported suffix,
                         parse error or invalid content
        """
        path = Path(path)
        suffix = path.suffix.lower()
        if suffix not in (".toml", ".json"):
            raise ConfigError(f"unsupported configuration format '{suffix or path.name}'", str(path))
        try:
            with open(path, "rb") as f:
                if suffix == ".toml":
                    data = tomllib.load(f)
                else:
                    data = json.load(f)
        except FileNotFoundError:
            raise ConfigError("configuration file not found", str(path)) from None
        except OSError as exc:
            raise ConfigError(f"cannot read configuration: {exc.strerror or exc}", str(path)) from exc
        except (tomllib.TOMLDecodeError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ConfigError(f"parse error: {exc}", str(path)) from exc

        if not isinstance(data, dict):
            raise ConfigError("configuration root must be a table/object", str(path))
        return cls.from_dict(data, source=str(path))

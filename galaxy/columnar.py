"""
Columnar star listings.

A listing is a set of index-aligned columns: element i of every column
describes the same star. Float columns are narrowed to float32 (positions,
luminosities, temperatures, masses); consumers are renderers, and float32
keeps ~7 significant digits, i.e. sub-ly precision out to ~100 000 ly.
Ids stay int64.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from .labels import star_type_label
from .space_objects import Star


@dataclass(slots=True)
class ColumnarStars:
    positions:    np.ndarray          # (N,3) float32, ly
    ids:          np.ndarray          # (N,)  int64
    luminosities: np.ndarray          # (N,)  float32, solar units
    temperatures: np.ndarray          # (N,)  float32, K
    masses:       np.ndarray          # (N,)  float32, solar masses
    star_types:   List[str] = field(default_factory=list)
    estimated_total_stars: Optional[int] = None
    diagnostic:   Optional[str] = None
    metadata:     Dict[str, Any] = field(default_factory=dict)   # query details, e.g. radius clamping

    @property
    def count(self) -> int:
        return int(self.ids.shape[0])

    def __len__(self) -> int:
        return self.count

    @classmethod
    def empty(cls, diagnostic: Optional[str] = None,
              estimated_total_stars: Optional[int] = None) -> ColumnarStars:
        return cls(
            positions=np.zeros((0, 3), dtype=np.float32),
            ids=np.zeros(0, dtype=np.int64),
            luminosities=np.zeros(0, dtype=np.float32),
            temperatures=np.zeros(0, dtype=np.float32),
            masses=np.zeros(0, dtype=np.float32),
            star_types=[],
            estimated_total_stars=estimated_total_stars,
            diagnostic=diagnostic,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Plain mapping for callers; optional keys are omitted when unset."""
        out: Dict[str, Any] = {
            "positions": self.positions,
            "ids": self.ids,
            "luminosities": self.luminosities,
            "temperatures": self.temperatures,
            "masses": self.masses,
            "star_types": list(self.star_types),
            "count": self.count,
        }
        if self.estimated_total_stars is not None:
            out["estimated_total_stars"] = self.estimated_total_stars
        if self.diagnostic is not None:
            out["diagnostic"] = self.diagnostic
        out.update(self.metadata)
        return out

    def to_dataframe(self) -> pd.DataFrame:
        """One row per star, listing order preserved."""
        return pd.DataFrame({
            "id": self.ids,
            "x": self.positions[:, 0],
            "y": self.positions[:, 1],
            "z": self.positions[:, 2],
            "star_type": pd.Series(self.star_types, dtype="object"),
            "mass": self.masses,
            "luminosity": self.luminosities,
            "temperature": self.temperatures,
        })

    def save_npz(self, path: str | Path) -> Path:
        path = Path(path)
        extra = {}
        if self.estimated_total_stars is not None:
            extra["estimated_total_stars"] = np.int64(self.estimated_total_stars)
        np.savez_compressed(
            path,
            positions=self.positions,
            ids=self.ids,
            luminosities=self.luminosities,
            temperatures=self.temperatures,
            masses=self.masses,
            star_types=np.array(self.star_types, dtype=np.str_),
            **extra,
        )
        # numpy appends .npz when missing
        return path if path.suffix == ".npz" else path.with_name(path.name + ".npz")

    @classmethod
    def load_npz(cls, path: str | Path) -> ColumnarStars:
        z = np.load(Path(path), allow_pickle=False)
        estimate = None
        if "estimated_total_stars" in z.files:
            estimate = int(z["estimated_total_stars"])
        return cls(
            positions=z["positions"].astype(np.float32).reshape(-1, 3),
            ids=z["ids"].astype(np.int64),
            luminosities=z["luminosities"].astype(np.float32),
            temperatures=z["temperatures"].astype(np.float32),
            masses=z["masses"].astype(np.float32),
            star_types=[str(s) for s in z["star_types"]],
            estimated_total_stars=estimate,
        )


def to_columns(stars: Sequence[Star], estimated_total_stars: Optional[int] = None) -> ColumnarStars:
    """Index-aligned columns for `stars`, order preserved."""
    n = len(stars)
    if n == 0:
        return ColumnarStars.empty(estimated_total_stars=estimated_total_stars)

    positions = np.empty((n, 3), dtype=np.float32)
    ids = np.empty(n, dtype=np.int64)
    lum = np.empty(n, dtype=np.float32)
    temp = np.empty(n, dtype=np.float32)
    mass = np.empty(n, dtype=np.float32)
    labels: List[str] = []
    for i, s in enumerate(stars):
        positions[i] = s.position.as_tuple()
        ids[i] = s.id
        lum[i] = s.luminosity
        temp[i] = s.temperature
        mass[i] = s.mass
        labels.append(star_type_label(s.star_type))

    return ColumnarStars(
        positions=positions,
        ids=ids,
        luminosities=lum,
        temperatures=temp,
        masses=mass,
        star_types=labels,
        estimated_total_stars=estimated_total_stars,
    )


from __future__ import annotations
import math
from dataclasses import dataclass

@dataclass(slots=True, frozen=True)
class Vec3:
    # units belong to the owner: ly for stars, AU for planets/belts, km for moons
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def norm(self) -> float:
        return math.sqrt(self.x*self.x + self.y*self.y + self.z*self.z)

    def distance_to(self, other: Vec3) -> float:
        dx = self.x - other.x
        dy = self.y - other.y
        dz = self.z - other.z
        return math.sqrt(dx*dx + dy*dy + dz*dz)

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}

    @classmethod
    def of(cls, x: float, y: float, z: float) -> Vec3:
        return cls(float(x), float(y), float(z))

from __future__ import annotations
import math
import numpy as np

def clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else hi if x > hi else x

def polar_to_cart(r: float, angle_rad: float, z: float = 0.0) -> tuple[float,float,float]:
    """Point at radius r in the xy plane (orbital plane), optional height z."""
    return (r*math.cos(angle_rad), r*math.sin(angle_rad), z)

def sph_to_cart(r: float, theta_rad: float, phi_rad: float) -> tuple[float,float,float]:
    """
    Spherical -> cartesian. theta is the polar angle from +z, phi the azimuth.
    """
    s = math.sin(theta_rad)
    return (r*s*math.cos(phi_rad), r*s*math.sin(phi_rad), r*math.cos(theta_rad))

def distances_from(points: np.ndarray, center: tuple[float,float,float]) -> np.ndarray:
    """
    Euclidean distance of each row of an (N,3) array from center.
    Always float64, whatever the input dtype.
    """
    if points.size == 0:
        return np.zeros(0, dtype=np.float64)
    d = points.astype(np.float64) - np.asarray(center, dtype=np.float64)
    return np.sqrt(np.einsum("ij,ij->i", d, d))

def block_range(lo: float, hi: float, block: float) -> range:
    """Integer block indices whose [i*block, (i+1)*block) span touches [lo, hi]."""
    return range(int(math.floor(lo / block)), int(math.floor(hi / block)) + 1)

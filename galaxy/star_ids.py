"""
Star id layout (63 bits, always a non-negative int64):

  bit  62      kind     0 = field star, 1 = structure sample
  bits 60-61   member   0 = primary, 1-2 = companions in the same system
  bit  59      reserved (always 0)
  bits 42-58   block x  (17 bits, offset by 2**16)
  bits 25-41   block y
  bits  8-24   block z
  bits  0-7    index of the star inside its block

Block indices are relative to the block grid of the star's kind: 10 ly
blocks for field stars, `structure_block_size` blocks for structure samples.
"""

from __future__ import annotations
from typing import NamedTuple

import numpy as np

from .errors import UnknownStarError


KIND_FIELD = 0
KIND_STRUCTURE = 1

INDEX_BITS = 8
BLOCK_BITS = 17
BLOCK_OFFSET = 1 << (BLOCK_BITS - 1)
MAX_BLOCK_INDEX = BLOCK_OFFSET - 1
MAX_INDEX = (1 << INDEX_BITS) - 1
MAX_MEMBER = 2

_Z_SHIFT = INDEX_BITS
_Y_SHIFT = _Z_SHIFT + BLOCK_BITS
_X_SHIFT = _Y_SHIFT + BLOCK_BITS
_RESERVED_BIT = 59
MEMBER_SHIFT = 60
KIND_SHIFT = 62

_BLOCK_MASK = (1 << BLOCK_BITS) - 1
_MEMBER_MASK = 0b11 << MEMBER_SHIFT


class StarKey(NamedTuple):
    kind:   int
    member: int
    ix:     int
    iy:     int
    iz:     int
    index:  int


def block_in_range(ix: int, iy: int, iz: int) -> bool:
    return all(-BLOCK_OFFSET <= i <= MAX_BLOCK_INDEX for i in (ix, iy, iz))


def pack_star_id(kind: int, ix: int, iy: int, iz: int, index: int, member: int = 0) -> int:
    if not block_in_range(ix, iy, iz):
        raise ValueError(f"block ({ix}, {iy}, {iz}) outside the id range")
    if not 0 <= index <= MAX_INDEX:
        raise ValueError(f"star index {index} outside [0, {MAX_INDEX}]")
    return ((kind << KIND_SHIFT) | (member << MEMBER_SHIFT)
            | ((ix + BLOCK_OFFSET) << _X_SHIFT)
            | ((iy + BLOCK_OFFSET) << _Y_SHIFT)
            | ((iz + BLOCK_OFFSET) << _Z_SHIFT)
            | index)


def pack_star_ids(kind: int, ix: np.ndarray, iy: np.ndarray, iz: np.ndarray,
                  index: np.ndarray) -> np.ndarray:
    """Vectorised pack_star_id for primaries (member 0). Inputs must be in range."""
    ix = ix.astype(np.int64) + BLOCK_OFFSET
    iy = iy.astype(np.int64) + BLOCK_OFFSET
    iz = iz.astype(np.int64) + BLOCK_OFFSET
    return ((np.int64(kind) << np.int64(KIND_SHIFT))
            | (ix << np.int64(_X_SHIFT))
            | (iy << np.int64(_Y_SHIFT))
            | (iz << np.int64(_Z_SHIFT))
            | index.astype(np.int64))


def unpack_star_id(star_id: int) -> StarKey:
    """
    Split an id into its fields.

    Raises:
        UnknownStarError: negative, too wide, or reserved bit set
    """
    if isinstance(star_id, bool) or not isinstance(star_id, (int, np.integer)):
        raise UnknownStarError(star_id, "not an integer")
    star_id = int(star_id)
    if star_id < 0 or star_id >> 63:
        raise UnknownStarError(star_id, "outside the 63-bit id space")
    if (star_id >> _RESERVED_BIT) & 1:
        raise UnknownStarError(star_id, "reserved bit set")
    member = (star_id >> MEMBER_SHIFT) & 0b11
    if member > MAX_MEMBER:
        raise UnknownStarError(star_id, f"member {member} out of range")
    return StarKey(
        kind=(star_id >> KIND_SHIFT) & 1,
        member=member,
        ix=((star_id >> _X_SHIFT) & _BLOCK_MASK) - BLOCK_OFFSET,
        iy=((star_id >> _Y_SHIFT) & _BLOCK_MASK) - BLOCK_OFFSET,
        iz=((star_id >> _Z_SHIFT) & _BLOCK_MASK) - BLOCK_OFFSET,
        index=star_id & MAX_INDEX,
    )


def primary_id(star_id: int) -> int:
    return int(star_id) & ~_MEMBER_MASK


def member_id(primary: int, member: int) -> int:
    return primary_id(primary) | (member << MEMBER_SHIFT)

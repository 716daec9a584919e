import math
from typing import Optional, Sequence, Tuple, Union

import numpy as np


LOCALITY_BITS = 32

_MASKS = (
    (16, 0x0000FFFF0000FFFF),
    (8, 0x00FF00FF00FF00FF),
    (4, 0x0F0F0F0F0F0F0F0F),
    (2, 0x3333333333333333),
    (1, 0x5555555555555555),
)

Bounds = Tuple[float, float, float, float]


def euclidean_distance(p1, p2) -> float:
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def normalise_between_range(
    val: float, min_val: float, max_val: float, new_min: float, new_max: float
) -> float:
    return new_min + (val - min_val) * (new_max - new_min) / (max_val - min_val)


def _spread_bits(v: np.ndarray) -> np.ndarray:
    v = v & np.uint64(0xFFFFFFFF)
    for shift, mask in _MASKS:
        v = (v | (v << np.uint64(shift))) & np.uint64(mask)
    return v


def _quantise(values: np.ndarray, lo: float, hi: float) -> np.ndarray:
    # a zero-width axis carries no ordering information
    if not hi > lo:
        return np.zeros(values.shape, dtype=np.uint64)
    top = float(2**LOCALITY_BITS - 1)
    clipped = np.clip(values, lo, hi)
    scaled = normalise_between_range(clipped, lo, hi, 0.0, top)
    return np.floor(scaled).astype(np.uint64)


def bounding_box(
    xs: Union[Sequence[float], np.ndarray], ys: Union[Sequence[float], np.ndarray]
) -> Bounds:
    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)
    return float(xs.min()), float(xs.max()), float(ys.min()), float(ys.max())


def locality_keys(
    xs: Union[Sequence[float], np.ndarray],
    ys: Union[Sequence[float], np.ndarray],
    bounds: Optional[Bounds] = None,
) -> np.ndarray:
    """
    Z-order (Morton) keys for a batch of coordinates.

    Each axis is scaled onto ``LOCALITY_BITS`` bits across ``bounds``
    (``min_x, max_x, min_y, max_y``), which defaults to the bounding box of
    the batch itself. Coordinates outside explicit bounds are clamped. Bits of
    x and y are interleaved with x taking the higher bit of each pair, so
    points that are close in the plane tend to be close in key order.
    """
    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)
    if xs.size == 0:
        return np.zeros(0, dtype=np.uint64)
    min_x, max_x, min_y, max_y = bounds if bounds is not None else bounding_box(xs, ys)
    qx = _quantise(xs, min_x, max_x)
    qy = _quantise(ys, min_y, max_y)
    return (_spread_bits(qx) << np.uint64(1)) | _spread_bits(qy)


def locality_key(x: float, y: float, bounds: Bounds) -> int:
    return int(locality_keys([x], [y], bounds)[0])

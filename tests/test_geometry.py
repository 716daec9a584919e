import math

import numpy as np

from top_ga.geometry import (
    bounding_box,
    euclidean_distance,
    locality_key,
    locality_keys,
    normalise_between_range,
)
from top_ga.solvers.base import Point, with_locality_keys


def test_euclidean_distance_basic():
    a = Point(1, 0.0, 0.0, 0)
    b = Point(2, 3.0, 4.0, 0)
    assert euclidean_distance(a, b) == 5.0
    assert euclidean_distance(b, a) == 5.0


def test_euclidean_distance_zero_only_for_same_location():
    pts = [Point(i, x, y, 1) for i, (x, y) in enumerate([(0, 0), (1.5, -2), (10.5, 14.4)], 1)]
    for p in pts:
        assert euclidean_distance(p, p) == 0.0
        for q in pts:
            if q != p:
                assert euclidean_distance(p, q) > 0.0


def test_normalise_between_range():
    assert normalise_between_range(5, 0, 10, 0, 1) == 0.5
    assert normalise_between_range(0, 0, 10, -1, 1) == -1
    assert math.isclose(normalise_between_range(7.5, 5, 10, 100, 200), 150)


BOX = (0.0, 20.0, 0.0, 20.0)


def test_locality_key_is_monotone_per_axis():
    base = locality_key(10.0, 10.0, BOX)
    assert locality_key(10.0, 12.0, BOX) > base
    assert locality_key(12.0, 10.0, BOX) > base
    assert locality_key(12.0, 12.0, BOX) > locality_key(12.0, 10.0, BOX)


def test_locality_keys_batch_matches_scalar():
    xs = [0.0, 10.5, -3.25, 18.5]
    ys = [0.0, 14.4, 7.0, 14.5]
    batch = locality_keys(xs, ys)
    box = bounding_box(xs, ys)
    assert box == (-3.25, 18.5, 0.0, 14.5)
    assert batch.dtype == np.uint64
    assert [int(k) for k in batch] == [locality_key(x, y, box) for x, y in zip(xs, ys)]


def test_locality_keys_follow_the_points_wherever_they_lie():
    xs = [50000.0, 50900.0, 50001.0, 50901.0]
    ys = [50000.0, 50900.0, 50000.0, 50900.0]
    keys = [int(k) for k in locality_keys(xs, ys)]
    assert len(set(keys)) == 4
    # the two south-west points sort together, ahead of the north-east pair
    assert sorted(range(4), key=keys.__getitem__) == [0, 2, 1, 3]
    shifted = [int(k) for k in locality_keys([x - 1.0e6 for x in xs], ys)]
    assert shifted == keys


def test_locality_keys_degenerate_axis():
    keys = [int(k) for k in locality_keys([5.0, 5.0, 5.0], [1.0, 3.0, 2.0])]
    assert keys[0] < keys[2] < keys[1]
    assert len(locality_keys([], [])) == 0


def test_locality_key_clamps_to_explicit_bounds():
    assert locality_key(200.0, 5.0, BOX) == locality_key(20.0, 5.0, BOX)
    assert locality_key(-7.0, 5.0, BOX) == locality_key(0.0, 5.0, BOX)


def test_point_key_is_derived_from_shared_box():
    p = Point(3, 16.5, 9.3, 10)
    assert p.key is None
    a, b = with_locality_keys([p, Point(4, 0.0, 0.0, 1)])
    assert a.key == locality_key(16.5, 9.3, (0.0, 16.5, 0.0, 9.3))
    assert b.key == 0
    # the key is derived data and does not affect identity
    assert a == p and hash(a) == hash(p)
    assert p != Point(4, 16.5, 9.3, 10)

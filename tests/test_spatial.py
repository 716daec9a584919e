import random

from top_ga.solvers.base import Point
from top_ga.spatial import PointPool


def _grid(n):
    return [Point(i + 1, float(i % 7), float(i // 7), float(i % 5)) for i in range(n)]


def test_buckets_are_contiguous_locality_slices():
    pool = PointPool(_grid(35))
    keys = [p.key for p in pool.points]
    assert keys == sorted(keys)
    buckets = pool.buckets
    assert len(buckets) == 10
    assert [p for b in buckets for p in b] == list(pool.points)
    assert all(b for b in buckets)


def test_bucket_count_is_capped_by_size():
    assert len(PointPool(_grid(4)).buckets) == 4
    assert PointPool([]).buckets == []


def test_sample_empty_pool_returns_none():
    assert PointPool([]).sample(random.Random(0)) is None


def test_sample_draws_pool_members():
    pool = PointPool(_grid(25))
    rng = random.Random(3)
    for _ in range(50):
        assert pool.sample(rng) in pool


def test_remove_rebuilds_index():
    pts = _grid(12)
    pool = PointPool(pts)
    assert pool.remove(pts[:3]) == 3
    assert len(pool) == 9
    assert pts[0] not in pool
    assert pool.rank(pts[0]) is None
    assert len(pool.buckets) == 9
    for rank, p in enumerate(pool.points):
        assert pool.rank(p) == rank
        assert pool.at_rank(rank) == p
    assert pool.remove(pts[:3]) == 0


def test_top_scoring():
    pool = PointPool(_grid(20))
    top = pool.top_scoring(3)
    assert len(top) == 3
    assert all(p.score == 4 for p in top)


def test_discard_unreachable():
    start = Point(1, 0, 0, 0)
    end = Point(5, 10, 0, 0)
    near = Point(2, 5, 1, 1)
    far = Point(3, 5, 20, 1)
    pool = PointPool([near, far])
    assert pool.discard_unreachable(start, end, 15.0) == 1
    assert list(pool) == [near]


def test_within_radius_sorted_by_distance():
    centre = Point(99, 0, 0, 0)
    a = Point(1, 3, 0, 1)
    b = Point(2, 1, 1, 1)
    c = Point(3, 10, 10, 1)
    pool = PointPool([a, b, c])
    assert pool.within_radius(centre, 3.0) == [b, a]
    assert pool.within_radius(centre, 0.5) == []
    assert PointPool([]).within_radius(centre, 5.0) == []


def test_pool_orders_far_out_points_by_locality():
    pts = [
        Point(1, 50000, 50000, 1),
        Point(2, 50900, 50900, 1),
        Point(3, 50001, 50000, 1),
        Point(4, 50901, 50900, 1),
    ]
    pool = PointPool(pts)
    assert len({p.key for p in pool}) == 4
    assert [p.id for p in pool] == [1, 3, 2, 4]
    assert pool.rank(pts[2]) == 1

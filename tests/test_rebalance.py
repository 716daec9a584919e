from top_ga.rebalance import add_maximum_points, rearrange
from top_ga.solvers.base import Point, Route
from top_ga.spatial import PointPool


S = Point(1, 0, 0, 0)
E = Point(9, 10, 0, 0)
P = Point(2, 5, 5, 1)
R = Point(3, 5, 4, 1)


def _total(routes):
    return sum(r.total_distance for r in routes)


def test_rearrange_moves_point_when_pair_gets_shorter():
    routes = [Route((S, P, E)), Route((S, R, E))]
    before = _total(routes)
    out = rearrange(routes, 20.0)
    assert out[0].points == (S, E)
    assert out[1].points == (S, P, R, E)
    assert _total(out) < before
    assert sum(r.total_score for r in out) == sum(r.total_score for r in routes)
    # input is left untouched
    assert routes[0].points == (S, P, E)


def test_rearrange_respects_budget():
    routes = [Route((S, P, E)), Route((S, R, E))]
    out = rearrange(routes, 14.3)
    assert out == routes


def test_rearrange_single_route_is_noop():
    routes = [Route((S, P, E))]
    assert rearrange(routes, 20.0) == routes


def test_add_maximum_points_prefers_high_scores():
    c = Point(4, 4, 1, 5)
    d = Point(5, 6, -1, 8)
    far = Point(6, 100, 100, 50)
    pool = PointPool([c, d, far])
    out = add_maximum_points([Route((S, E))], pool, 15.0)
    assert out[0].points == (S, c, d, E)
    assert out[0].total_distance <= 15.0
    assert list(pool) == [far]


def test_add_maximum_points_skips_used_points():
    used = Point(7, 2, 0, 9)
    fresh = Point(8, 8, 0, 3)
    pool = PointPool([used, fresh])
    routes = [Route((S, used, E)), Route((S, E))]
    out = add_maximum_points(routes, pool, 12.0)
    ids = [r.ids for r in out]
    assert ids[0].count(7) == 1
    assert sum(i.count(8) for i in ids) == 1
    assert len(pool) == 0


def test_add_maximum_points_respects_budget():
    c = Point(4, 2, 2.5, 5)
    pool = PointPool([c])
    out = add_maximum_points([Route((S, E))], pool, 10.5)
    assert out[0].points == (S, E)
    assert list(pool) == [c]


def test_rebalancing_twice_never_loses_score():
    c = Point(4, 4, 1, 5)
    d = Point(5, 6, -1, 8)
    pool = PointPool([c, d])
    routes = [Route((S, P, E)), Route((S, R, E))]
    once = add_maximum_points(rearrange(routes, 20.0), pool, 20.0)
    twice = add_maximum_points(rearrange(once, 20.0), pool, 20.0)
    score = lambda rs: sum(r.total_score for r in rs)
    assert score(twice) >= score(once) >= score(routes)
    for r in twice:
        assert r.total_distance <= 20.0

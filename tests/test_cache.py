"""Per-node memoization, the evaluator's lock discipline and graph depth."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import exact, within_one
from creals import Constant, Sum, from_f64, from_int
from creals.cache import ApproximationCache


class CountingConstant(Constant):
    __slots__ = ("calls",)

    def __init__(self, value):
        super().__init__(value)
        self.calls = 0

    def scaled(self, p):
        self.calls += 1
        return super().scaled(p)


def test_empty_cache():
    cache = ApproximationCache()
    assert cache.lookup(0) is None
    assert cache.msd is None


def test_cache_shifts_coarser_requests():
    cache = ApproximationCache()
    cache.store(10, 0b1011 << 6)
    assert cache.lookup(10) == 0b1011 << 6
    assert cache.lookup(4) == 0b1011
    assert cache.lookup(2) == 0b10
    assert cache.lookup(11) is None
    assert cache.msd == 0


def test_cache_floors_negative_values():
    cache = ApproximationCache()
    cache.store(3, -9)
    assert cache.lookup(1) == -3
    assert cache.lookup(-10) == -1


def test_monotonicity(rng):
    x = from_f64(0.1) * from_f64(3.7) + from_f64(2.0).inverse()
    for _ in range(50):
        p2 = rng.randint(-20, 100)
        p1 = rng.randint(-40, p2)
        high = x.approximate(p2)
        assert x.approximate(p1) == high >> (p2 - p1)
        assert within_one(x, p1)


def test_coarser_query_does_not_touch_operands():
    left = CountingConstant(5)
    right = CountingConstant(7)
    val = left * right
    val.approximate(20)
    calls = left.calls + right.calls
    assert val.approximate(10) == 35 << 10
    assert val.approximate(-3) == 4
    assert left.calls + right.calls == calls


def test_finer_query_replaces_entry():
    val = from_int(3) + from_int(4)
    val.approximate(0)
    assert val.cache.precision == 0
    val.approximate(12)
    assert val.cache.precision == 12
    assert val.cache.value == 7 << 12
    val.approximate(5)
    assert val.cache.precision == 12


def test_every_combinator_is_cached():
    x = from_int(6)
    for node in [x + x, -x, x * x, x.inverse()]:
        assert node.cache is not None
        node.approximate(8)
        assert node.cache.valid
        assert node.cache.precision == 8
    assert x.cache is None


def test_concurrent_queries(rng):
    x = from_f64(1.1)
    y = from_f64(-0.3)
    shared = x * y + x.inverse()
    nodes = [shared * shared - y, shared + x, (shared * y).inverse()]
    values = [exact(node) for node in nodes]
    jobs = [(rng.randrange(len(nodes)), rng.randint(-10, 300)) for _ in range(400)]

    def check(job):
        i, p = job
        return within_one(nodes[i], p, values[i])

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(check, jobs))
    assert all(results)
    for node in nodes:
        assert not node.cache.lock.locked()


def test_deep_chain_does_not_recurse():
    total = from_int(0)
    expected = 0
    for i in range(3000):
        total = total + from_int(i)
        expected += i
    assert total.approximate(0) == expected
    assert total.to_f64() == float(expected)


def test_deep_negation_chain():
    val = from_int(5)
    for _ in range(5001):
        val = -val
    assert val.approximate(4) == -5 << 4


class FailingSum(Sum):
    __slots__ = ()

    def compute(self, p):
        raise RuntimeError("compute failed")


def test_failure_before_first_request_releases_lock():
    bad = FailingSum(from_int(1), from_int(2))
    parent = bad + from_int(3)
    for node in [bad, parent]:
        with pytest.raises(RuntimeError):
            node.approximate(0)
        assert not bad.cache.lock.locked()
        assert not parent.cache.lock.locked()

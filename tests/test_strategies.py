import numpy as np
import pytest

from lbsim.config import POLICY_NAMES, ConfigError
from lbsim.strategies import (
    POLICIES,
    LeastRequest,
    RandomSelect,
    RoundRobin,
    make_policy,
)


class ScriptedRng:
    """Returns a fixed sequence of integers in place of random draws."""

    def __init__(self, values):
        self.values = list(values)

    def integers(self, low, high=None, size=None):
        return self.values.pop(0)


def test_round_robin_advances_before_returning():
    rr = RoundRobin(3, np.random.default_rng(0))
    assert [rr.select(3) for _ in range(6)] == [1, 2, 0, 1, 2, 0]


def test_round_robin_cycles_without_repeats():
    k = 5
    rr = RoundRobin(k, np.random.default_rng(0))
    picks = [rr.select(k) for _ in range(3 * k)]
    for c in range(3):
        cycle = picks[c * k:(c + 1) * k]
        assert sorted(cycle) == list(range(k))
    assert picks[0] == 1 % k


def test_random_select_in_range_and_reproducible():
    a = RandomSelect(4, np.random.default_rng(123))
    b = RandomSelect(4, np.random.default_rng(123))
    picks_a = [a.select(4) for _ in range(200)]
    picks_b = [b.select(4) for _ in range(200)]
    assert picks_a == picks_b
    assert set(picks_a) == {0, 1, 2, 3}


def test_least_request_prefers_strictly_smaller_first_draw():
    lr = LeastRequest(3, ScriptedRng([2, 2, 0]))
    lr.active_requests[:] = [5, 0, 1]
    assert lr.select(3) == 2


def test_least_request_avoids_larger_count():
    lr = LeastRequest(3, ScriptedRng([0, 1]))
    lr.active_requests[:] = [4, 1, 0]
    assert lr.select(3) == 1


def test_least_request_tie_goes_to_second_draw():
    lr = LeastRequest(4, ScriptedRng([3, 1]))
    lr.active_requests[:] = [2, 2, 2, 2]
    assert lr.select(4) == 1


def test_least_request_never_picks_the_busier_server():
    lr = LeastRequest(6, np.random.default_rng(9))
    lr.active_requests[:] = [0, 10, 10, 10, 10, 10]
    picks = [lr.select(6) for _ in range(300)]
    # server 0 wins every pair it is drawn into
    assert 0 in picks
    assert all(p == 0 or lr.active_requests[p] == 10 for p in picks)


def test_least_request_single_server():
    lr = LeastRequest(1, np.random.default_rng(0))
    assert lr.select(1) == 0


def test_hooks_maintain_local_counters():
    rr = RoundRobin(2, np.random.default_rng(0))
    rr.on_send_request(1)
    rr.on_send_request(1)
    rr.on_receive_response(1)
    assert rr.active_requests.tolist() == [0, 1]
    with pytest.raises(RuntimeError):
        rr.on_receive_response(0)


def test_registry_matches_configured_names():
    assert tuple(POLICIES) == POLICY_NAMES
    rng = np.random.default_rng(0)
    for name in POLICY_NAMES:
        policy = make_policy(name, 4, rng)
        assert policy.name == name
        assert policy.active_requests.tolist() == [0, 0, 0, 0]


def test_make_policy_rejects_unknown_name():
    with pytest.raises(ConfigError):
        make_policy("Least Connections", 4, np.random.default_rng(0))

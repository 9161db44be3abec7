import numpy as np
import pytest

from lbsim.proxy import Frontend, ProxyNode
from lbsim.strategies import RoundRobin
from lbsim.upstream import Backend


def test_send_request_routes_and_counts():
    backend = Backend(3)
    proxy = ProxyNode(4, backend, RoundRobin(3, np.random.default_rng(0)))

    assert proxy.send_request() == 1
    assert proxy.send_request() == 2
    assert proxy.outstanding.tolist() == [0, 1, 1]
    assert backend.active_request_snapshot().tolist() == [0, 1, 1]
    assert backend.servers[1].request_sources.tolist() == [4]

    proxy.receive_response(1)
    assert proxy.outstanding.tolist() == [0, 0, 1]


def test_counter_never_goes_negative():
    backend = Backend(2)
    proxy = ProxyNode(0, backend, RoundRobin(2, np.random.default_rng(0)))
    with pytest.raises(RuntimeError):
        proxy.receive_response(0)


def test_policy_must_match_backend_size():
    with pytest.raises(ValueError):
        ProxyNode(0, Backend(3), RoundRobin(2, np.random.default_rng(0)))


def test_proxies_keep_private_views():
    backend = Backend(2)
    frontend = Frontend(2, backend, "Round Robin", np.random.default_rng(0))
    frontend.proxies[0].send_request()
    assert frontend.proxies[0].outstanding.tolist() == [0, 1]
    assert frontend.proxies[1].outstanding.tolist() == [0, 0]


def test_single_proxy_always_sends():
    backend = Backend(2)
    frontend = Frontend(1, backend, "Random Select", np.random.default_rng(5))
    for _ in range(10):
        assert frontend.generate_arrivals() == 1
    assert int(backend.active_request_snapshot().sum()) == 10


def test_arrival_rate_is_one_per_tick_on_average():
    backend = Backend(4)
    frontend = Frontend(8, backend, "Random Select", np.random.default_rng(11))
    sent = sum(frontend.generate_arrivals() for _ in range(5000))
    assert 4500 < sent < 5500


def test_arrival_override():
    backend = Backend(2)

    def two_from_last(fe):
        fe.proxies[-1].send_request()
        fe.proxies[-1].send_request()
        return 2

    frontend = Frontend(3, backend, "Round Robin", np.random.default_rng(0), arrival_fn=two_from_last)
    assert frontend.generate_arrivals() == 2
    assert frontend.proxies[2].outstanding.tolist() == [1, 1]
    assert frontend.proxies[0].outstanding.sum() == 0

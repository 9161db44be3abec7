from __future__ import annotations
import numpy as np
from typing import Callable, List, Optional

from .strategies import LoadBalancer, make_policy
from .upstream import Backend


class ProxyNode:
    """
    A proxy with its own routing policy.
    `backend` is a non-owning reference: the Backend outlives every proxy
    that routes into it.
    """

    def __init__(self, proxy_id: int, backend: Backend, policy: LoadBalancer):
        if policy.active_requests.size != backend.num_servers:
            raise ValueError(
                f"Policy tracks {policy.active_requests.size} servers, backend has {backend.num_servers}"
            )
        self.id = int(proxy_id)
        self.backend = backend
        self.load_balancer = policy

    @property
    def outstanding(self) -> np.ndarray:
        """Local per-server count of this proxy's requests still in flight."""
        return self.load_balancer.active_requests

    def send_request(self) -> int:
        """Route one request and return the index of the chosen server."""
        selected = self.load_balancer.select(self.backend.num_servers)
        self.load_balancer.on_send_request(selected)
        self.backend.enqueue(selected, self.id)
        return selected

    def receive_response(self, server_index: int) -> None:
        self.load_balancer.on_receive_response(server_index)


class Frontend:
    """
    The cluster of proxies. Each tick every proxy independently sends one
    request with probability 1 / n_proxies, so one request per tick is
    expected cluster-wide.
    `arrival_fn` replaces that law, e.g. with a deterministic schedule.
    """

    def __init__(
        self,
        n_proxies: int,
        backend: Backend,
        policy_name: str,
        rng: np.random.Generator,
        arrival_fn: Optional[Callable[["Frontend"], int]] = None,
    ):
        self.rng = rng
        self.proxies: List[ProxyNode] = [
            ProxyNode(i, backend, make_policy(policy_name, backend.num_servers, rng))
            for i in range(int(n_proxies))
        ]
        self.arrival_fn = arrival_fn if arrival_fn is not None else self.arrival_fn_default

    @staticmethod
    def arrival_fn_default(frontend: "Frontend") -> int:
        """Bernoulli(1/n) trial per proxy; returns the number of requests sent."""
        n = len(frontend.proxies)
        draws = frontend.rng.integers(0, n, size=n)
        sent = 0
        for proxy, draw in zip(frontend.proxies, draws):
            if draw == 0:
                proxy.send_request()
                sent += 1
        return sent

    def generate_arrivals(self) -> int:
        return int(self.arrival_fn(self))

    def receive_response(self, proxy_id: int, server_index: int) -> None:
        self.proxies[proxy_id].receive_response(server_index)

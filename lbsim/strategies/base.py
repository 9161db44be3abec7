from __future__ import annotations
import numpy as np


class LoadBalancer:
    """
    State shared by every routing policy: the owning proxy's private count of
    outstanding requests per upstream server. Only Least Request reads it.
    """

    name = ""

    def __init__(self, n_servers: int, rng: np.random.Generator):
        self.rng = rng
        self.active_requests = np.zeros(int(n_servers), dtype=np.int64)

    def select(self, n_servers: int) -> int:
        raise NotImplementedError

    def on_send_request(self, server: int) -> None:
        self.active_requests[server] += 1

    def on_receive_response(self, server: int) -> None:
        if self.active_requests[server] <= 0:
            raise RuntimeError(f"Response from server {server} with no outstanding request")
        self.active_requests[server] -= 1

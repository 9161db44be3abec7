from .base import LoadBalancer


class RoundRobin(LoadBalancer):
    """
    Round Robin strategy: cycle through the upstream servers in index order.
    The cursor is advanced before it is read, so starting from 0 the first
    pick is server 1 (1 mod n), then 2, ..., n-1, 0, 1, ...
    """

    name = "Round Robin"

    def __init__(self, n_servers, rng):
        super().__init__(n_servers, rng)
        self.cur_idx = 0

    def select(self, n_servers: int) -> int:
        self.cur_idx = (self.cur_idx + 1) % n_servers
        return self.cur_idx

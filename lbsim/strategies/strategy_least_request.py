from .base import LoadBalancer


class LeastRequest(LoadBalancer):
    """
    Least Request strategy (power of two choices):
    draw two distinct servers at random and keep the one with fewer
    outstanding requests in this proxy's local view.
    On a tie the second draw wins.
    """

    name = "Least Request"

    def select(self, n_servers: int) -> int:
        if n_servers < 2:
            return 0
        rng = self.rng
        server1 = int(rng.integers(0, n_servers))
        server2 = server1
        while server2 == server1:
            server2 = int(rng.integers(0, n_servers))
        load = self.active_requests
        return server1 if load[server1] < load[server2] else server2

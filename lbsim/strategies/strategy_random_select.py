from .base import LoadBalancer


class RandomSelect(LoadBalancer):
    """Random Select strategy: pick an upstream server uniformly at random."""

    name = "Random Select"

    def select(self, n_servers: int) -> int:
        return int(self.rng.integers(0, n_servers))

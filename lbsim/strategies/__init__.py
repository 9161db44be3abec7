"""
Routing policy exports.
"""

import numpy as np

from ..config import ConfigError
from .base import LoadBalancer
from .strategy_round_robin import RoundRobin
from .strategy_random_select import RandomSelect
from .strategy_least_request import LeastRequest

POLICIES = {
    RoundRobin.name: RoundRobin,
    RandomSelect.name: RandomSelect,
    LeastRequest.name: LeastRequest,
}


def make_policy(policy_name: str, n_servers: int, rng: np.random.Generator) -> LoadBalancer:
    """Build a fresh policy instance; unknown names fail immediately."""
    try:
        cls = POLICIES[policy_name]
    except KeyError:
        raise ConfigError(
            f"Unknown policy {policy_name!r}, expected one of {', '.join(POLICIES)}"
        ) from None
    return cls(n_servers, rng)


__all__ = [
    "LoadBalancer",
    "RoundRobin",
    "RandomSelect",
    "LeastRequest",
    "POLICIES",
    "make_policy",
]

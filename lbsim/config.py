from __future__ import annotations
import numbers
from dataclasses import dataclass
from typing import Optional

# -------- Tunable parameters --------
SERVICE_TIME = 100      # Ticks an upstream server spends on one request
CONCURRENCY = 6         # Requests per upstream server that make progress each tick
TAIL_DIVISOR = 1000     # Tail latency skips the top count // TAIL_DIVISOR samples

POLICY_NAMES = ("Round Robin", "Random Select", "Least Request")


class ConfigError(ValueError):
    """Raised when a simulation is configured with invalid parameters."""


def _check_positive_int(field: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ConfigError(f"{field} must be an integer, got {value!r}")
    if value <= 0:
        raise ConfigError(f"{field} must be positive, got {value}")


@dataclass(frozen=True)
class SimConfig:
    """
    Parameters of one simulation run. Validated on construction so that a
    bad value never reaches a half-built simulator.
    """

    proxy_count: int
    backend_server_count: int
    policy_name: str
    concurrency: int = CONCURRENCY
    service_time: int = SERVICE_TIME
    seed: Optional[int] = None

    def __post_init__(self):
        _check_positive_int("proxy_count", self.proxy_count)
        _check_positive_int("backend_server_count", self.backend_server_count)
        _check_positive_int("concurrency", self.concurrency)
        _check_positive_int("service_time", self.service_time)
        if self.policy_name not in POLICY_NAMES:
            raise ConfigError(
                f"Unknown policy {self.policy_name!r}, expected one of {', '.join(POLICY_NAMES)}"
            )

from __future__ import annotations
import numpy as np
from typing import Any, Callable, Dict, List, Optional

from .config import CONCURRENCY, SERVICE_TIME, TAIL_DIVISOR, ConfigError, SimConfig
from .proxy import Frontend
from .upstream import Backend, CompletionRecord


class LBSimulator:
    """
    Tick-driven load-balancing simulator:
    - Backend processes, producing this tick's completions
    - completions go back to their proxies and into the statistics
    - imbalance (max - min active requests) is sampled before new arrivals
    - the Frontend generates the arrivals that the next tick will serve
    """

    def __init__(
        self,
        proxy_count: int,
        backend_server_count: int,
        policy_name: str,
        concurrency: int = CONCURRENCY,
        service_time: int = SERVICE_TIME,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        arrival_fn: Optional[Callable[[Frontend], int]] = None,
        output=None,                   # anything with write_tick(int)
        record_history: bool = True,
    ):
        if seed is not None and rng is not None:
            raise ConfigError("Pass either seed or rng, not both")
        self.config = SimConfig(
            proxy_count=proxy_count,
            backend_server_count=backend_server_count,
            policy_name=policy_name,
            concurrency=concurrency,
            service_time=service_time,
            seed=seed,
        )
        self.policy_name = policy_name
        self.rng = rng if rng is not None else np.random.default_rng(seed)

        self.backend = Backend(backend_server_count, concurrency=concurrency, service_time=service_time)
        self.frontend = Frontend(proxy_count, self.backend, policy_name, self.rng, arrival_fn=arrival_fn)
        self.output = output
        self.record_hist = record_history

        # Statistics
        self.timer = 0
        self.request_cnt = 0
        self.total_latency = 0
        self.all_latency: List[int] = []
        self.imbalance_hist: List[int] = []
        self.imbalance_sum = 0
        self.imbalance_max = 0

    @classmethod
    def from_config(cls, config: SimConfig, **kwargs) -> "LBSimulator":
        return cls(
            config.proxy_count,
            config.backend_server_count,
            config.policy_name,
            concurrency=config.concurrency,
            service_time=config.service_time,
            seed=config.seed,
            **kwargs,
        )

    # ================== Main loop ================== #
    def tick(self) -> int:
        """Run one time unit; returns the number of requests completed."""
        completions = self.backend.tick()
        self._collect_stats(completions)
        n_done = len(completions)
        del completions
        self.frontend.generate_arrivals()
        return n_done

    def run(self, n_ticks: int, verbose: bool = False, log_every: int = 1000) -> Dict[str, Any]:
        for _ in range(int(n_ticks)):
            self.tick()
            if verbose and self.timer % log_every == 0:
                print(
                    f"tick {self.timer:>8d}, completed={self.request_cnt}, "
                    f"in_flight={self.active_total()}"
                )
        return self.summary()

    def _collect_stats(self, completions: List[CompletionRecord]) -> None:
        self.timer += 1
        for rec in completions:
            self.frontend.receive_response(rec.origin, rec.server_id)
            self.total_latency += rec.latency
            self.all_latency.append(rec.latency)
        self.request_cnt += len(completions)

        states = self.backend.active_request_snapshot()
        imbalance = int(states.max() - states.min())
        self.imbalance_sum += imbalance
        self.imbalance_max = max(self.imbalance_max, imbalance)
        if self.record_hist:
            self.imbalance_hist.append(imbalance)
        if self.output is not None:
            self.output.write_tick(imbalance)

    # ================== Statistics ================== #
    def mean_latency(self) -> Optional[int]:
        """Integer mean latency, or None when nothing has completed."""
        if self.request_cnt == 0:
            return None
        return self.total_latency // self.request_cnt

    def tail_latency(self) -> Optional[int]:
        """
        Approximate high percentile: sort all latencies and take index
        size - count // 1000. Below 1000 samples that index is past the end
        and is clamped to the maximum. None when nothing has completed.
        """
        if self.request_cnt == 0 or not self.all_latency:
            return None
        lat = np.sort(np.asarray(self.all_latency, dtype=np.int64))
        idx = lat.size - self.request_cnt // TAIL_DIVISOR
        idx = int(np.clip(idx, 0, lat.size - 1))
        return int(lat[idx])

    def imbalance_series(self) -> np.ndarray:
        return np.asarray(self.imbalance_hist, dtype=np.int64)

    def active_total(self) -> int:
        return int(self.backend.active_request_snapshot().sum())

    def outstanding_total(self) -> int:
        return int(sum(p.outstanding.sum() for p in self.frontend.proxies))

    def summary(self) -> Dict[str, Any]:
        return dict(
            policy=self.policy_name,
            ticks=self.timer,
            requests=self.request_cnt,
            in_flight=self.active_total(),
            mean_latency=self.mean_latency(),
            tail_latency=self.tail_latency(),
            avg_imbalance=(self.imbalance_sum / self.timer) if self.timer else 0.0,
            max_imbalance=self.imbalance_max,
        )

from __future__ import annotations
import numpy as np
from typing import List, NamedTuple

from .config import CONCURRENCY, SERVICE_TIME

INITIAL_CAPACITY = 16   # Queue slots allocated per server up front
_TIMER, _LATENCY, _SOURCE = 0, 1, 2


class CompletionRecord(NamedTuple):
    """One finished request, handed from the backend to the simulator."""

    origin: int       # proxy that sent the request
    server_id: int    # server that served it
    latency: int      # ticks between the first tick it was seen and completion


class UpstreamServer:
    """
    FIFO queue with a positional concurrency window:
    - every queued request ages by one tick of latency per tick
    - only the first `concurrency` requests make service progress
    - finished requests are drained from the front only
    Queue state lives in one (3, capacity) buffer; rows are remaining service
    ticks, accumulated latency and origin proxy id. Live entries are
    buf[:, head:tail]; the buffer is compacted or doubled when tail hits the end.
    """

    def __init__(self, server_id: int, concurrency: int = CONCURRENCY, service_time: int = SERVICE_TIME):
        self.server_id = int(server_id)
        self.concurrency = int(concurrency)
        self.service_time = int(service_time)

        self._buf = np.zeros((3, INITIAL_CAPACITY), dtype=np.int64)
        self._head = 0
        self._tail = 0

    # Views over the live part of the queue
    @property
    def service_timers(self) -> np.ndarray:
        return self._buf[_TIMER, self._head:self._tail]

    @property
    def latencies(self) -> np.ndarray:
        return self._buf[_LATENCY, self._head:self._tail]

    @property
    def request_sources(self) -> np.ndarray:
        return self._buf[_SOURCE, self._head:self._tail]

    def _make_room(self) -> None:
        live = self._tail - self._head
        cap = max(self._buf.shape[1], 2 * live)
        buf = np.zeros((3, cap), dtype=np.int64) if cap != self._buf.shape[1] else self._buf
        buf[:, :live] = self._buf[:, self._head:self._tail]
        self._buf = buf
        self._head, self._tail = 0, live

    def enqueue(self, origin_id: int) -> None:
        """Accept a request; there is no admission limit, only processing is bounded."""
        if self._tail == self._buf.shape[1]:
            self._make_room()
        self._buf[:, self._tail] = (self.service_time, 0, int(origin_id))
        self._tail += 1

    def tick(self) -> List[CompletionRecord]:
        if self._tail == self._head:
            return []
        timers = self.service_timers
        latencies = self.latencies

        latencies += 1
        timers[:self.concurrency] -= 1

        # Pop from the front while the head has no service left
        pending = np.flatnonzero(timers != 0)
        n_done = int(pending[0]) if pending.size else int(timers.size)
        if n_done == 0:
            return []

        done = [
            CompletionRecord(int(origin), self.server_id, int(latency))
            for origin, latency in zip(self.request_sources[:n_done], latencies[:n_done])
        ]
        self._head += n_done
        if self._head == self._tail:
            self._head = self._tail = 0
        return done

    def active_requests(self) -> int:
        return self._tail - self._head


class Backend:
    """The fixed cluster of upstream servers that actually serve requests."""

    def __init__(self, n_servers: int, concurrency: int = CONCURRENCY, service_time: int = SERVICE_TIME):
        self.servers: List[UpstreamServer] = [
            UpstreamServer(i, concurrency=concurrency, service_time=service_time)
            for i in range(int(n_servers))
        ]

    @property
    def num_servers(self) -> int:
        return len(self.servers)

    def enqueue(self, server_index: int, origin_id: int) -> None:
        self.servers[server_index].enqueue(origin_id)

    def tick(self) -> List[CompletionRecord]:
        """Advance every server one tick and return this tick's completions."""
        completions: List[CompletionRecord] = []
        for server in self.servers:
            completions.extend(server.tick())
        return completions

    def active_request_snapshot(self) -> np.ndarray:
        return np.array([s.active_requests() for s in self.servers], dtype=np.int64)

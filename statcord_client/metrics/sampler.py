"""Metrics sampling for a single stats submission."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from ..config.constants import CPU_UNSUPPORTED_PLATFORMS
from ..config.model import ClientOptions
from ..errors.internal import TransportFailure
from .provider import SystemMetricsProvider

T = TypeVar("T")


@dataclass(slots=True)
class MetricsSample:
    """Values placed in the payload. Disabled metrics stay at zero."""

    bandwidth: int = 0
    cpuload: int = 0
    memactive: int = 0
    memload: int = 0


class MetricsSampler:
    """Samples network, CPU and memory metrics according to ``ClientOptions``.

    Holds the received-bytes baseline between submissions.
    """

    def __init__(self, options: ClientOptions, provider: SystemMetricsProvider) -> None:
        self.options = options
        self.provider = provider
        self.bandwidth_baseline: int = 0

    async def sample(
        self,
        *,
        bandwidth: float | None = None,
        cpuload: float | None = None,
        memory_active: float | None = None,
        memory_used: float | None = None,
    ) -> MetricsSample:
        """Run the enabled samplers in order network, CPU, memory.

        Caller supplied values take precedence over sampled ones.

        Raises:
            TransportFailure: If the metrics provider fails.
        """
        result = MetricsSample()
        if self.options.post_network_statistics:
            result.bandwidth = await self._sample_network(bandwidth)
        if self.options.post_cpu_statistics:
            result.cpuload = await self._sample_cpu(cpuload)
        if self.options.post_memory_statistics:
            result.memactive, result.memload = await self._sample_memory(
                memory_active, memory_used
            )
        return result

    async def _sample_network(self, baseline_override: float | None) -> int:
        baseline = baseline_override if baseline_override is not None else self.bandwidth_baseline
        stats = await self._call(self.provider.network_stats, "network_stats")
        total = int(sum(int(iface.get("rx_bytes", 0)) for iface in stats))
        self.bandwidth_baseline = total
        if baseline <= 0:
            logging.debug(f"📶 Bandwidth baseline stored ({total} bytes), reporting 0")
            return 0
        return int(total - baseline)

    async def _sample_cpu(self, cpuload: float | None) -> int:
        if cpuload is not None:
            return round(cpuload)
        platform = await self._call(self.provider.platform, "platform")
        # sys.platform carries the major release on the BSDs ("freebsd14")
        if str(platform).rstrip("0123456789") in CPU_UNSUPPORTED_PLATFORMS:
            return 0
        load = await self._call(self.provider.current_load, "current_load")
        return round(float(load.get("current_load", 0)))

    async def _sample_memory(
        self, memory_active: float | None, memory_used: float | None
    ) -> tuple[int, int]:
        if memory_active is not None and memory_used is not None:
            return round(memory_active), round(memory_used)
        mem = await self._call(self.provider.mem, "mem")
        active = int(mem.get("active", 0))
        total = int(mem.get("total", 0))
        load = round(active / total * 100) if total else 0
        return (
            round(memory_active) if memory_active is not None else active,
            round(memory_used) if memory_used is not None else load,
        )

    @staticmethod
    async def _call(func: Callable[[], T], name: str) -> T:
        try:
            return await asyncio.to_thread(func)
        except Exception as e:  # noqa: BLE001
            raise TransportFailure(
                f"Metrics provider call {name}() failed: {type(e).__name__}: {e}",
                data={"metric": name},
            ) from e


__all__ = ["MetricsSample", "MetricsSampler"]

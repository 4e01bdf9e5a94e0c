"""System metrics provider consumed by the sampler.

``SystemMetricsProvider`` is the narrow interface the sampler needs; the
default implementation reads counters through psutil.
"""

from __future__ import annotations

import sys
from typing import Any, Protocol

import psutil


class SystemMetricsProvider(Protocol):
    """Source of host metrics.

    Methods are synchronous; the sampler runs them off the event loop.
    """

    def network_stats(self) -> list[dict[str, Any]]: ...  # noqa: D401,E701

    def current_load(self) -> dict[str, Any]: ...  # noqa: D401,E701

    def mem(self) -> dict[str, Any]: ...  # noqa: D401,E701

    def platform(self) -> str: ...  # noqa: D401,E701


class PsutilMetricsProvider:
    """Metrics provider backed by psutil."""

    def __init__(self) -> None:
        # First cpu_percent(None) call always returns 0.0; prime it so the
        # first real sample covers the interval since construction.
        psutil.cpu_percent(interval=None)

    def network_stats(self) -> list[dict[str, Any]]:
        """Per-interface received byte counters."""
        counters = psutil.net_io_counters(pernic=True)
        return [{"iface": name, "rx_bytes": c.bytes_recv} for name, c in counters.items()]

    def current_load(self) -> dict[str, Any]:
        return {"current_load": psutil.cpu_percent(interval=None)}

    def mem(self) -> dict[str, Any]:
        vm = psutil.virtual_memory()
        # 'active' is not reported on Windows
        active = getattr(vm, "active", None)
        if active is None:
            active = vm.used
        return {"active": active, "total": vm.total}

    def platform(self) -> str:
        return sys.platform

from .provider import PsutilMetricsProvider, SystemMetricsProvider
from .sampler import MetricsSample, MetricsSampler

__all__ = ["SystemMetricsProvider", "PsutilMetricsProvider", "MetricsSample", "MetricsSampler"]

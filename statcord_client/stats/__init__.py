from .accumulator import UsageAccumulator

__all__ = ["UsageAccumulator"]

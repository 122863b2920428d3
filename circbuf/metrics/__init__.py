from .prometheus import BufferMetrics, get_default_metrics

__all__ = ["BufferMetrics", "get_default_metrics"]

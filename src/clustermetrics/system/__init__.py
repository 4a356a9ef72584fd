"""Local host sampling with psutil."""

from .sampler import (
    DEFAULT_TYPES,
    sample_cpu,
    sample_local_metrics,
    sample_mem,
    sample_net,
    sample_process,
)

__all__ = [
    "DEFAULT_TYPES",
    "sample_local_metrics",
    "sample_cpu",
    "sample_mem",
    "sample_net",
    "sample_process",
]

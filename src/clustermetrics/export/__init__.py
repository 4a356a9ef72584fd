"""
Polars export of merged metrics.

- segmented_to_frame: one row per bucket of an interval series
- stats_map_to_frame: one row per key of a record map
- disk_breakdown_frame / disk_set_frame: per-disk and per-set tables
"""

from .frames import disk_breakdown_frame, disk_set_frame, segmented_to_frame, stats_map_to_frame

__all__ = [
    "segmented_to_frame",
    "stats_map_to_frame",
    "disk_breakdown_frame",
    "disk_set_frame",
]

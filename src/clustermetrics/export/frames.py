"""
Tabular views of merged metrics using Polars.

Merged snapshots are nested dataclasses; these helpers flatten the parts that
are naturally tabular (interval series, per-key statistics and the disk
breakdown) into Polars DataFrames for analysis or storage.
"""

import logging
from dataclasses import fields, is_dataclass
from typing import Any, Dict, List, Mapping, Optional

import polars as pl

from ..config import ExportConfig, get_config
from ..models import DiskMetric, RealtimeMetrics, Segmented

logger = logging.getLogger(__name__)


def _flatten(record: Any, prefix: str = "") -> Dict[str, Any]:
    """
    Flatten a record into scalar columns.

    Nested records become ``<field>_<subfield>`` columns. Maps, lists and
    interval series have no single-row form and are left out.
    """
    row: Dict[str, Any] = {}
    for f in fields(record):
        value = getattr(record, f.name)
        if isinstance(value, (dict, list, Segmented)):
            continue
        if is_dataclass(value):
            row.update(_flatten(value, f"{prefix}{f.name}_"))
        else:
            row[f"{prefix}{f.name}"] = value
    return row


def _export_config(config: Optional[ExportConfig]) -> ExportConfig:
    return config or get_config().export


def _with_time_zone(df: pl.DataFrame, column: str, time_zone: str) -> pl.DataFrame:
    dtype = df.schema[column]
    if not isinstance(dtype, pl.Datetime):
        return df
    if dtype.time_zone is None:
        return df.with_columns(pl.col(column).dt.replace_time_zone(time_zone))
    return df.with_columns(pl.col(column).dt.convert_time_zone(time_zone))


def segmented_to_frame(
    series: Segmented,
    include_empty: Optional[bool] = None,
    config: Optional[ExportConfig] = None,
) -> pl.DataFrame:
    """
    Convert an interval series to one row per bucket.

    Args:
        series: Series to convert
        include_empty: Keep zero-valued buckets; ``export.include_empty_segments``
            when omitted
        config: Export settings; the global configuration when omitted

    Returns:
        DataFrame with ``segment`` and ``start`` columns followed by the
        flattened bucket record. Empty when the series has no buckets.
    """
    export_config = _export_config(config)
    if include_empty is None:
        include_empty = export_config.include_empty_segments

    if not series.segments:
        return pl.DataFrame()

    empty_record = series.record_type()()
    rows: List[Dict[str, Any]] = []
    for i, segment in enumerate(series.segments):
        if not include_empty and segment == empty_record:
            continue
        row = {"segment": i, "start": series.segment_time(i)}
        row.update(_flatten(segment))
        rows.append(row)

    if not rows:
        return pl.DataFrame()

    df = pl.DataFrame(rows, infer_schema_length=None)
    df = _with_time_zone(df, "start", export_config.time_zone)
    logger.debug(f"Exported {len(df)} of {len(series.segments)} buckets")
    return df


def stats_map_to_frame(mapping: Mapping[str, Any], key_name: str = "name") -> pl.DataFrame:
    """
    Convert a map of records to one row per key, sorted by key.

    Args:
        mapping: Records keyed by name, for example last-minute API stats
        key_name: Name of the key column

    Returns:
        DataFrame with the key column followed by the flattened records
    """
    rows = []
    for key in sorted(mapping):
        row = {key_name: key}
        row.update(_flatten(mapping[key]))
        rows.append(row)

    if not rows:
        return pl.DataFrame(schema={key_name: pl.Utf8})
    return pl.DataFrame(rows, infer_schema_length=None)


def _disk_row(disk: DiskMetric) -> Dict[str, Any]:
    last_minute = disk.last_minute_total()
    return {
        "pool_idx": disk.pool_idx,
        "set_idx": disk.set_idx,
        "disk_idx": disk.disk_idx,
        "n_disks": disk.n_disks,
        "offline": disk.offline,
        "healing": disk.healing,
        "hanging": disk.hanging,
        "total_bytes": disk.space.total,
        "used_bytes": disk.space.used,
        "free_bytes": disk.space.free,
        "used_ratio": disk.space.used_ratio(),
        "ops_last_minute": last_minute.count,
        "avg_op_time_last_minute": last_minute.avg(),
        "availability_errs_last_minute": last_minute.availability_errs,
        "timeouts_last_minute": last_minute.timeouts,
    }


def disk_breakdown_frame(realtime: RealtimeMetrics) -> pl.DataFrame:
    """
    One row per disk in ``by_disk``, ordered by pool, set and disk index.

    Disks whose location is unknown sort last.
    """
    rows = []
    for name, disk in realtime.by_disk.items():
        row = {"disk": name}
        row.update(_disk_row(disk))
        rows.append(row)

    if not rows:
        return pl.DataFrame(schema={"disk": pl.Utf8})
    df = pl.DataFrame(rows, infer_schema_length=None)
    return df.sort(["pool_idx", "set_idx", "disk_idx", "disk"], nulls_last=True)


def disk_set_frame(realtime: RealtimeMetrics) -> pl.DataFrame:
    """One row per erasure set in ``by_disk_set``, ordered by pool then set."""
    rows = []
    for pool_idx in sorted(realtime.by_disk_set):
        sets = realtime.by_disk_set[pool_idx]
        for set_idx in sorted(sets):
            row = _disk_row(sets[set_idx])
            # Keys are authoritative; the merged record may have lost its location.
            row["pool_idx"] = pool_idx
            row["set_idx"] = set_idx
            rows.append(row)

    if not rows:
        return pl.DataFrame(schema={"pool_idx": pl.Int64, "set_idx": pl.Int64})
    return pl.DataFrame(rows, infer_schema_length=None)

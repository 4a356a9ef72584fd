"""
Configuration data models.

Plain dataclasses holding validated settings loaded from ``config.toml``.
Validation lives in ``validators``; these classes only carry values and
convert back to dictionaries for reporting.
"""

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class AggregationConfig:
    """
    Settings for the snapshot aggregation worker, from ``[aggregation]``.

    Attributes:
        queue_size: Snapshots that may wait for the worker before submit blocks
        queue_timeout: Seconds the worker waits on an empty queue before
            re-checking its stop flag
        submit_timeout: Seconds ``submit`` waits for queue space before the
            snapshot is dropped
        join_timeout: Seconds to wait for the worker thread when stopping
        thread_name: Name given to the worker thread
    """

    queue_size: int = 1024
    queue_timeout: float = 0.1
    submit_timeout: float = 1.0
    join_timeout: float = 5.0
    thread_name: str = "SnapshotAggregator"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "queue_size": self.queue_size,
            "queue_timeout": self.queue_timeout,
            "submit_timeout": self.submit_timeout,
            "join_timeout": self.join_timeout,
            "thread_name": self.thread_name,
        }


@dataclass
class ExportConfig:
    """
    Settings for tabular export, from ``[export]``.

    Attributes:
        include_empty_segments: Keep buckets without data as zero rows
        time_zone: Time zone attached to exported timestamp columns
    """

    include_empty_segments: bool = True
    time_zone: str = "UTC"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "include_empty_segments": self.include_empty_segments,
            "time_zone": self.time_zone,
        }


@dataclass
class LoggingConfig:
    """Log level and format, from ``[logging]``."""

    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"

    def to_dict(self) -> Dict[str, Any]:
        return {"level": self.level, "format": self.format}


@dataclass
class AppConfig:
    """The complete application configuration."""

    aggregation: AggregationConfig = field(default_factory=AggregationConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aggregation": self.aggregation.to_dict(),
            "export": self.export.to_dict(),
            "logging": self.logging.to_dict(),
        }

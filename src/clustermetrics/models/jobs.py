"""
Batch job and site resync progress.

These records report state rather than accumulated activity, so merging picks
the freshest report instead of summing: batch jobs are replaced by id and a
site resync report is replaced wholesale by a more recent one.
"""

import copy
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Dict, List, Optional

from .base import Mergeable, later


@dataclass
class ReplicateInfo:
    bucket: str = ""
    object: str = ""
    objects: int = 0
    objects_failed: int = 0
    bytes_transferred: int = 0
    bytes_failed: int = 0


@dataclass
class KeyRotationInfo:
    bucket: str = ""
    object: str = ""
    objects: int = 0
    objects_failed: int = 0


@dataclass
class ExpirationInfo:
    bucket: str = ""
    object: str = ""
    objects: int = 0
    objects_failed: int = 0


@dataclass
class CatalogInfo:
    last_bucket_scanned: str = ""
    last_object_scanned: str = ""
    last_bucket_matched: str = ""
    last_object_matched: str = ""
    objects_scanned_count: int = 0
    objects_matched_count: int = 0
    records_written_count: int = 0
    output_objects_count: int = 0
    manifest_path_bucket: str = ""
    manifest_path_object: str = ""
    error_msg: str = ""


@dataclass
class JobMetric:
    """
    Progress of one batch job. Only the field matching ``job_type`` is set.
    """

    job_id: str = ""
    job_type: str = ""
    start_time: Optional[datetime] = None
    last_update: Optional[datetime] = None
    retry_attempts: int = 0
    complete: bool = False
    failed: bool = False
    replicate: Optional[ReplicateInfo] = None
    key_rotate: Optional[KeyRotationInfo] = None
    expired: Optional[ExpirationInfo] = None
    catalog: Optional[CatalogInfo] = None


@dataclass
class BatchJobMetrics(Mergeable):
    collected_at: Optional[datetime] = None
    jobs: Dict[str, JobMetric] = field(default_factory=dict)

    def merge(self, other: Optional["BatchJobMetrics"]) -> None:
        if other is None or not other.jobs:
            return
        self.collected_at = later(self.collected_at, other.collected_at)
        for job_id, job in other.jobs.items():
            self.jobs[job_id] = copy.deepcopy(job)

    def running(self) -> List[JobMetric]:
        """Jobs that have neither completed nor failed."""
        return [job for job in self.jobs.values() if not job.complete and not job.failed]


@dataclass
class SiteResyncMetrics(Mergeable):
    """
    Progress of a site replication resync.

    Attributes:
        collected_at: Collection time of this report
        resync_status: Status string reported by the site
        start_time: Resync start
        last_update: Last progress update
        num_buckets: Buckets to resync
        resync_id: Resync operation id
        depl_id: Deployment id of the peer site
        replicated_size: Bytes replicated
        replicated_count: Objects replicated
        failed_size: Bytes that failed
        failed_count: Objects that failed
        failed_buckets: Buckets that could not be synced
        bucket: Last bucket replicated
        object: Last object replicated
    """

    collected_at: Optional[datetime] = None
    resync_status: str = ""
    start_time: Optional[datetime] = None
    last_update: Optional[datetime] = None
    num_buckets: int = 0
    resync_id: str = ""
    depl_id: str = ""
    replicated_size: int = 0
    replicated_count: int = 0
    failed_size: int = 0
    failed_count: int = 0
    failed_buckets: List[str] = field(default_factory=list)
    bucket: str = ""
    object: str = ""

    def complete(self) -> bool:
        return self.resync_status.lower() == "completed"

    def merge(self, other: Optional["SiteResyncMetrics"]) -> None:
        if other is None or other.collected_at is None:
            return
        if self.collected_at is None or self.collected_at < other.collected_at:
            for f in fields(self):
                setattr(self, f.name, copy.deepcopy(getattr(other, f.name)))

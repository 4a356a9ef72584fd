"""
Snapshot aggregation.

Merging mutates the accumulator in place without locking, so an accumulator
must have exactly one writer. ``SnapshotAggregator`` enforces that: producers
hand snapshots over through a queue and a single worker thread owns the
accumulator and performs every merge.

For callers that already hold all snapshots, ``merge_snapshots`` folds them
synchronously and ``merge_partitioned`` folds disjoint partitions into
separate accumulators in parallel before combining them with one more merge.
"""

import logging
import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, List, Optional

from ..config import AggregationConfig, get_config
from ..models import RealtimeMetrics
from ..validation import AggregatorClosedError, ErrorSeverity, handle_aggregation_error

logger = logging.getLogger(__name__)


class SnapshotAggregator:
    """
    Single-writer aggregation pass over a stream of node snapshots.

    Snapshots are merged in the order they are dequeued. The pass ends after a
    snapshot flagged ``final`` has been merged, or when ``stop()`` is called;
    in the latter case snapshots already queued are merged first.

    Merging is not idempotent: submitting the same snapshot twice counts it
    twice. Producers must not modify a snapshot after submitting it.

    Closing the pass and queueing a snapshot are serialized, so once
    ``closed`` is set no further snapshot can enter the queue. Snapshots that
    were already queued behind the final snapshot are discarded and counted in
    ``snapshots_unmerged``.

    A merge that raises part way leaves whatever it had already added in the
    accumulator; the failure is counted and recorded in the accumulator's
    ``errors``.
    """

    def __init__(
        self,
        config: Optional[AggregationConfig] = None,
        accumulator: Optional[RealtimeMetrics] = None,
    ):
        """
        Initialize the aggregator.

        Args:
            config: Aggregation settings; the global configuration when omitted
            accumulator: Existing accumulator to continue merging into
        """
        self.config = config or get_config().aggregation
        self.accumulator = accumulator if accumulator is not None else RealtimeMetrics()
        self.snapshot_queue: "queue.Queue[RealtimeMetrics]" = queue.Queue(
            maxsize=self.config.queue_size
        )

        self.stop_event = threading.Event()
        self.finished_event = threading.Event()
        self.thread: Optional[threading.Thread] = None
        self.running = False
        self.closed = False

        self._counter_lock = threading.Lock()
        self._close_lock = threading.Lock()
        self.snapshots_submitted = 0
        self.snapshots_merged = 0
        self.snapshots_dropped = 0
        self.snapshots_unmerged = 0
        self.merge_failures = 0
        self.total_merge_time = 0.0
        self.last_merge_time = 0.0

        logger.debug(f"SnapshotAggregator initialized with queue size {self.config.queue_size}")

    def start(self) -> None:
        """Start the worker thread."""
        if self.running:
            logger.warning("SnapshotAggregator already running")
            return
        if self.closed:
            handle_aggregation_error(
                AggregatorClosedError("aggregation pass already finished"),
                context="starting worker",
                severity=ErrorSeverity.ERROR,
                reraise=True,
                logger=logger,
            )

        self.running = True
        self.stop_event.clear()
        self.thread = threading.Thread(
            target=self.aggregation_loop,
            name=self.config.thread_name,
            daemon=True,
        )
        self.thread.start()
        logger.info(f"SnapshotAggregator {self.config.thread_name} started")

    def submit(self, snapshot: RealtimeMetrics, timeout: Optional[float] = None) -> bool:
        """
        Hand a snapshot to the worker.

        Args:
            snapshot: Decoded node snapshot
            timeout: Seconds to wait for queue space; the configured
                ``submit_timeout`` when omitted

        Returns:
            True if the snapshot was queued, False if it was dropped because
            the queue stayed full

        Raises:
            AggregatorClosedError: If the pass has finished or was stopped
        """
        wait = self.config.submit_timeout if timeout is None else timeout
        deadline = time.monotonic() + wait
        while True:
            with self._close_lock:
                if self.closed or self.stop_event.is_set():
                    handle_aggregation_error(
                        AggregatorClosedError("cannot submit snapshot: aggregation pass has finished"),
                        context="submitting snapshot",
                        severity=ErrorSeverity.ERROR,
                        reraise=True,
                        logger=logger,
                    )
                try:
                    self.snapshot_queue.put_nowait(snapshot)
                    break
                except queue.Full:
                    pass

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                with self._counter_lock:
                    self.snapshots_dropped += 1
                logger.warning(
                    f"Snapshot queue full, dropping snapshot from hosts {snapshot.hosts}"
                )
                return False
            # The lock is released while waiting so the worker can close the pass.
            time.sleep(min(self.config.queue_timeout, remaining))

        with self._counter_lock:
            self.snapshots_submitted += 1
        return True

    def aggregation_loop(self) -> None:
        """Worker loop: merge queued snapshots until the final one or a stop request."""
        logger.info(f"SnapshotAggregator {self.config.thread_name} loop started")

        final_merged = False
        try:
            while True:
                try:
                    snapshot = self.snapshot_queue.get(timeout=self.config.queue_timeout)
                except queue.Empty:
                    if self.stop_event.is_set():
                        break
                    continue

                try:
                    self._merge(snapshot)
                finally:
                    self.snapshot_queue.task_done()

                if snapshot.final:
                    logger.info(
                        f"Final snapshot merged after {self.snapshots_merged} snapshots"
                    )
                    final_merged = True
                    break

        except Exception as e:
            logger.error(f"Fatal error in SnapshotAggregator loop: {e}", exc_info=True)
        finally:
            with self._close_lock:
                self.closed = True
            self._drain(merge=not final_merged)
            self.running = False
            self.finished_event.set()
            logger.info(f"SnapshotAggregator {self.config.thread_name} loop finished")

    def _drain(self, merge: bool) -> None:
        """Empty the queue once closed: merge after a stop, discard after the final snapshot."""
        discarded = 0
        while True:
            try:
                snapshot = self.snapshot_queue.get_nowait()
            except queue.Empty:
                break
            try:
                if merge:
                    self._merge(snapshot)
                else:
                    discarded += 1
            finally:
                self.snapshot_queue.task_done()

        if discarded:
            self.snapshots_unmerged += discarded
            logger.warning(f"{discarded} snapshots queued after the final snapshot were not merged")

    def _merge(self, snapshot: RealtimeMetrics) -> None:
        merge_start = time.time()
        try:
            self.accumulator.merge(snapshot)
        except Exception as e:
            self.merge_failures += 1
            self.accumulator.errors.append(f"{','.join(snapshot.hosts)}: merge failed: {e}")
            logger.error(f"Error merging snapshot from hosts {snapshot.hosts}: {e}", exc_info=True)
            return

        duration = time.time() - merge_start
        self.snapshots_merged += 1
        self.total_merge_time += duration
        self.last_merge_time = time.time()
        logger.debug(
            f"Merged snapshot from {snapshot.hosts} in {duration * 1000:.2f}ms "
            f"({self.snapshots_merged} total)"
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Stop accepting snapshots and wait for the worker to drain the queue.

        Args:
            timeout: Seconds to wait; the configured ``join_timeout`` when omitted
        """
        self.stop_event.set()
        if not self.running and self.thread is None:
            with self._close_lock:
                self.closed = True
            return

        wait = self.config.join_timeout if timeout is None else timeout
        logger.info(f"Stopping SnapshotAggregator {self.config.thread_name}...")
        if self.thread and self.thread.is_alive():
            self.thread.join(timeout=wait)
            if self.thread.is_alive():
                logger.warning("SnapshotAggregator did not stop within timeout")
            else:
                logger.info("SnapshotAggregator stopped successfully")

    def result(self, timeout: Optional[float] = None) -> RealtimeMetrics:
        """
        Wait for the pass to finish and return the accumulator.

        Args:
            timeout: Seconds to wait; the configured ``join_timeout`` when omitted

        Raises:
            RuntimeError: If the worker was never started
            TimeoutError: If the pass does not finish in time
        """
        if self.thread is None:
            handle_aggregation_error(
                RuntimeError("aggregator was never started"),
                context="reading result",
                severity=ErrorSeverity.ERROR,
                reraise=True,
                logger=logger,
            )

        wait = self.config.join_timeout if timeout is None else timeout
        if not self.finished_event.wait(wait):
            handle_aggregation_error(
                TimeoutError(f"aggregation pass did not finish within {wait}s"),
                context="reading result",
                severity=ErrorSeverity.WARNING,
                reraise=True,
                logger=logger,
            )
        return self.accumulator

    def get_performance_info(self) -> Dict[str, Any]:
        """Counters describing the pass so far."""
        avg_merge_ms = 0.0
        if self.snapshots_merged > 0:
            avg_merge_ms = self.total_merge_time / self.snapshots_merged * 1000
        return {
            "running": self.running,
            "closed": self.closed,
            "snapshots_submitted": self.snapshots_submitted,
            "snapshots_merged": self.snapshots_merged,
            "snapshots_dropped": self.snapshots_dropped,
            "snapshots_unmerged": self.snapshots_unmerged,
            "merge_failures": self.merge_failures,
            "average_merge_ms": avg_merge_ms,
            "last_merge_time": self.last_merge_time,
            "queue_size": self.snapshot_queue.qsize(),
        }

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()


def merge_snapshots(
    snapshots: Iterable[RealtimeMetrics],
    accumulator: Optional[RealtimeMetrics] = None,
) -> RealtimeMetrics:
    """
    Fold snapshots into one accumulator on the calling thread.

    Args:
        snapshots: Snapshots to merge, each at most once
        accumulator: Accumulator to merge into; a fresh one when omitted

    Returns:
        The accumulator
    """
    result = accumulator if accumulator is not None else RealtimeMetrics()
    count = 0
    for snapshot in snapshots:
        result.merge(snapshot)
        count += 1
    logger.debug(f"Merged {count} snapshots")
    return result


def merge_partitioned(
    snapshots: List[RealtimeMetrics],
    partitions: int = 4,
    max_workers: Optional[int] = None,
) -> RealtimeMetrics:
    """
    Merge disjoint partitions of snapshots in parallel, then combine them.

    Each partition gets its own accumulator, so no accumulator is shared
    between threads. The partial results are merged in partition order on the
    calling thread.

    Args:
        snapshots: Snapshots to merge
        partitions: Number of partitions (and partial accumulators)
        max_workers: Thread pool size; ``partitions`` when omitted

    Returns:
        A new accumulator holding every snapshot
    """
    if partitions < 1:
        raise ValueError(f"partitions must be >= 1, got {partitions}")
    if not snapshots:
        return RealtimeMetrics()

    chunks = [snapshots[i::partitions] for i in range(partitions)]
    chunks = [chunk for chunk in chunks if chunk]

    with ThreadPoolExecutor(
        max_workers=max_workers or len(chunks),
        thread_name_prefix="SnapshotPartition",
    ) as executor:
        partials = list(executor.map(merge_snapshots, chunks))

    logger.debug(f"Combining {len(partials)} partial accumulators")
    return merge_snapshots(partials)

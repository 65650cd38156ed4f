# backend/app/services/performance_monitor.py
import logging
import time
import uuid
from collections import deque
from contextlib import contextmanager
from typing import Any, Deque, Dict, Iterator, List, Optional

import pandas as pd

from app.schemas.performance import MetricReport, PerformanceMetric, PerformanceStats
from settings import PerformanceConfig

logger = logging.getLogger("uvicorn")


def _now_ms() -> float:
    return time.perf_counter() * 1000


class PerformanceMonitor:
    """
    Tracks operation durations in a bounded ring buffer.

    One instance is built at startup and kept on `app.state`; completed
    metrics beyond `max_stored_metrics` drop off the old end. Trackings that
    are started but never ended are discarded after `stale_after_ms`.
    """

    def __init__(self, max_stored_metrics: int = PerformanceConfig.MAX_STORED_METRICS,
                 slow_threshold_ms: float = PerformanceConfig.SLOW_OPERATION_MS,
                 stale_after_ms: float = PerformanceConfig.STALE_TRACKING_MS):
        self.max_stored_metrics = max_stored_metrics
        self.slow_threshold_ms = slow_threshold_ms
        self.stale_after_ms = stale_after_ms
        self._active: Dict[str, PerformanceMetric] = {}
        self._completed: Deque[PerformanceMetric] = deque(maxlen=max_stored_metrics)

    def __len__(self) -> int:
        return len(self._completed)

    def start_tracking(self, operation: str, metadata: Optional[Dict[str, Any]] = None) -> str:
        now = _now_ms()
        self._drop_stale(now)
        tracking_id = f"{operation}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"
        self._active[tracking_id] = PerformanceMetric(
            operation=operation,
            start_time=now,
            metadata=metadata,
        )
        logger.debug(f"Started tracking: {operation} ({tracking_id})")
        return tracking_id

    def _drop_stale(self, now: float) -> None:
        stale = [tid for tid, m in self._active.items() if now - m.start_time > self.stale_after_ms]
        for tracking_id in stale:
            del self._active[tracking_id]
        if stale:
            logger.warning(f"⚠️ Dropped {len(stale)} unfinished performance trackings")

    def end_tracking(self, tracking_id: str, success: bool = True, error: Optional[str] = None) -> Optional[PerformanceMetric]:
        metric = self._active.pop(tracking_id, None)
        if metric is None:
            logger.warning(f"⚠️ No performance tracking found for ID: {tracking_id}")
            return None

        metric.end_time = _now_ms()
        metric.duration = metric.end_time - metric.start_time
        metric.success = success
        metric.error = error
        self._store(metric)
        return metric

    @contextmanager
    def track(self, operation: str, metadata: Optional[Dict[str, Any]] = None) -> Iterator[str]:
        tracking_id = self.start_tracking(operation, metadata)
        try:
            yield tracking_id
        except Exception as e:
            self.end_tracking(tracking_id, success=False, error=str(e))
            raise
        else:
            self.end_tracking(tracking_id)

    def record(self, report: MetricReport) -> PerformanceMetric:
        """Store a metric measured elsewhere (e.g. reported by the frontend)."""
        end = _now_ms()
        metric = PerformanceMetric(
            operation=report.operation,
            start_time=end - report.duration,
            end_time=end,
            duration=report.duration,
            success=report.success,
            error=report.error,
            metadata=report.metadata,
            source=report.source or "frontend",
        )
        self._store(metric)
        return metric

    def _store(self, metric: PerformanceMetric) -> None:
        self._completed.append(metric)
        message = f"{metric.operation} completed in {metric.duration:.2f}ms [{metric.source}]"
        if not metric.success:
            logger.warning(f"⚠️ {message} with error: {metric.error}")
        elif metric.duration > self.slow_threshold_ms:
            logger.warning(f"⚠️ Slow operation: {message}")
        else:
            logger.info(f"⏱️ {message}")

    def get_stats(self) -> PerformanceStats:
        completed = list(self._completed)
        if not completed:
            return PerformanceStats(
                total_operations=0,
                average_duration=0.0,
                success_rate=0.0,
                slow_operations=[],
                failed_operations=[],
            )

        df = pd.DataFrame(
            {
                "operation": [m.operation for m in completed],
                "duration": [m.duration or 0.0 for m in completed],
                "success": [bool(m.success) for m in completed],
            }
        )
        slow_mask = df["duration"] > self.slow_threshold_ms
        failed_mask = ~df["success"]

        per_op = df.groupby("operation")["duration"].agg(count="count", average="mean", max="max")
        by_operation = {
            op: {name: float(value) for name, value in row.items()}
            for op, row in per_op.iterrows()
        }

        return PerformanceStats(
            total_operations=len(df),
            average_duration=float(df["duration"].mean()),
            success_rate=float(df["success"].mean() * 100),
            slow_operations=[completed[i] for i in df.index[slow_mask]],
            failed_operations=[completed[i] for i in df.index[failed_mask]],
            by_operation=by_operation,
        )

    def get_operation_metrics(self, operation: str) -> List[PerformanceMetric]:
        return [m for m in self._completed if m.operation == operation]

    def clear(self) -> None:
        self._completed.clear()
        self._active.clear()
        logger.info("🧹 Cleared all stored performance metrics")

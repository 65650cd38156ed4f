# backend/app/api/api_v1/performance.py
from typing import List

from fastapi import APIRouter, Depends

from app.api.deps import get_performance_monitor
from app.schemas import MetricAccepted, MetricReport, PerformanceMetric, PerformanceStats
from app.services import PerformanceMonitor

router = APIRouter()


@router.post("/performance/metrics", response_model=MetricAccepted)
def report_metric(payload: MetricReport, monitor: PerformanceMonitor = Depends(get_performance_monitor)):
    """Accept a metric measured by the frontend."""
    monitor.record(payload)
    return MetricAccepted()


@router.get("/performance/stats", response_model=PerformanceStats)
def performance_stats(monitor: PerformanceMonitor = Depends(get_performance_monitor)):
    return monitor.get_stats()


@router.get("/performance/metrics/{operation}", response_model=List[PerformanceMetric])
def operation_metrics(operation: str, monitor: PerformanceMonitor = Depends(get_performance_monitor)):
    return monitor.get_operation_metrics(operation)


@router.delete("/performance/metrics")
def clear_metrics(monitor: PerformanceMonitor = Depends(get_performance_monitor)):
    monitor.clear()
    return {"ok": True}

# backend/app/schemas/performance.py
from typing import Any, Dict, List, Optional

from pydantic import Field

from app.schemas.base import CamelModel


class MetricReport(CamelModel):
    """A metric reported by a client (e.g. the browser)."""
    operation: str
    duration: float = Field(..., ge=0, description="Duration in ms")
    success: bool = True
    error: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    timestamp: Optional[str] = None
    source: Optional[str] = None


class PerformanceMetric(CamelModel):
    operation: str
    start_time: float
    end_time: Optional[float] = None
    duration: Optional[float] = None
    success: bool = False
    error: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    source: str = "backend"


class PerformanceStats(CamelModel):
    total_operations: int
    average_duration: float
    success_rate: float
    slow_operations: List[PerformanceMetric]
    failed_operations: List[PerformanceMetric]
    by_operation: Dict[str, Dict[str, float]] = Field(default_factory=dict)


class MetricAccepted(CamelModel):
    ok: bool = True

# backend/app/services/__init__.py
from .validation import ValidationService, ValidationResult, validation_service
from .profile_data import ProfileData, ProfileSchema, schema_from_tables
from .performance_monitor import PerformanceMonitor
from . import rbac

__all__ = [
    "ValidationService",
    "ValidationResult",
    "validation_service",
    "ProfileData",
    "ProfileSchema",
    "schema_from_tables",
    "PerformanceMonitor",
    "rbac",
]

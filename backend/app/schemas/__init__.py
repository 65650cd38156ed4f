# app/schemas/__init__.py
from .field import (
    AvailableField,
    FieldConstraints,
    FieldMetadata,
    ForeignKeyReference,
    CompatibilityResult,
    FieldListResponse,
    TableFieldsResponse,
    GroupedFieldsResponse,
    GroupedFieldsSummary,
    FieldSearchResponse,
)

from .table import (
    ColumnDefinition,
    ForeignKeyInfo,
    TableSchema,
    TableListResponse,
    TableExistsResponse,
)

from .form import (
    FormField,
    FormCard,
    CreateFormRequest,
    UpdateFormRequest,
    DuplicateFormRequest,
    FormTemplateResponse,
    FormDataResponse,
    FormClientCompatibility,
    FormSwitchReport,
    FormCompatibilityRequest,
    CompareFormsRequest,
)

from .admin import (
    Permission,
    UserRole,
    AdminUser,
    PermissionSummary,
    PermissionCheckRequest,
    PermissionCheckResponse,
    SummaryRequest,
)

from .performance import (
    MetricReport,
    MetricAccepted,
    PerformanceMetric,
    PerformanceStats,
)

# app/core/exceptions.py
"""
Application error taxonomy.

Every error carries the operation context in its message plus a machine
readable code and HTTP status, so the API layer can render it without
inspecting message text.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger("uvicorn")


class AppException(Exception):
    """Base class for all application errors."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class InputValidationError(AppException):
    """A required call argument is missing or blank."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="INPUT_VALIDATION_ERROR",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class ValueValidationError(AppException):
    """A value does not match the type declared for its field."""

    def __init__(self, field: str, expected_type: str, received_value: Any):
        super().__init__(
            message=f"Validation failed for field '{field}': expected {expected_type}, received {received_value}",
            code="VALIDATION_ERROR",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={
                "field": field,
                "expectedType": expected_type,
                "receivedValue": received_value,
            },
        )
        self.field = field
        self.expected_type = expected_type
        self.received_value = received_value


class NotFoundError(AppException):
    def __init__(self, resource: str, identifier: Any = None, details: Optional[Dict[str, Any]] = None):
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} '{identifier}' not found"
        super().__init__(
            message=message,
            code="NOT_FOUND_ERROR",
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
        )
        self.details["resource"] = resource
        if identifier is not None:
            self.details["identifier"] = str(identifier)


class FieldNotFoundError(AppException):
    """Strict lookup of a table or column that does not exist."""

    def __init__(self, message: str, table_name: str, column_name: Optional[str] = None):
        super().__init__(
            message=message,
            code="FIELD_NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"tableName": table_name, "columnName": column_name},
        )


class ConflictError(AppException):
    def __init__(self, message: str, resource: Optional[str] = None):
        super().__init__(
            message=message,
            code="CONFLICT_ERROR",
            status_code=status.HTTP_409_CONFLICT,
        )
        if resource:
            self.details["resource"] = resource


class ForeignKeyError(AppException):
    """A row references a client_id that does not exist in personal_details."""

    def __init__(
        self,
        table_name: str,
        client_id: int,
        referenced_table: str = "personal_details",
        column_name: str = "client_id",
        message: Optional[str] = None,
    ):
        super().__init__(
            message=message or f"Foreign key violation: client_id {client_id} does not exist in {referenced_table} table",
            code="FOREIGN_KEY_ERROR",
            status_code=status.HTTP_409_CONFLICT,
            details={
                "tableName": table_name,
                "clientId": client_id,
                "referencedTable": referenced_table,
                "columnName": column_name,
            },
        )


class FieldDiscoveryError(AppException):
    """Schema introspection failed while performing `operation`."""

    def __init__(self, operation: str, cause: Exception):
        super().__init__(
            message=f"Failed to {operation}: {cause}",
            code="FIELD_DISCOVERY_ERROR",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"operation": operation, "cause": type(cause).__name__},
        )
        self.operation = operation
        self.__cause__ = cause


class MigrationError(AppException):
    def __init__(self, operation: str, details: str, table_name: Optional[str] = None):
        super().__init__(
            message=f"Migration error during {operation}: {details}",
            code="MIGRATION_ERROR",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"operation": operation, "details": details, "tableName": table_name},
        )


# ---------- FastAPI integration ----------

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render any AppException as {"error": {...}} with its own status code."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"❌ {request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

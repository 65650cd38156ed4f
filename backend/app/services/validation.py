# backend/app/services/validation.py
"""
Application-level validation for values that are persisted as TEXT.

Profile tables store everything as TEXT, so types are enforced here before
writing rather than by SQL column types.
"""

import math
import re
from datetime import date
from typing import Any, Dict, List, Literal, Mapping

from pydantic import BaseModel, Field

from app.core.exceptions import ValueValidationError

ExpectedType = Literal["numeric", "date", "boolean", "text"]

_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DATETIME_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(\.\d{3})?(Z|[+-]\d{2}:\d{2})?$"
)


class ValidationResult(BaseModel):
    is_valid: bool
    value: Any = None
    errors: List[str] = Field(default_factory=list)


def _failure(field_name: str, expected: str, received: Any) -> ValidationResult:
    return ValidationResult(is_valid=False, errors=[ValueValidationError(field_name, expected, received).message])


def _render(value: Any) -> str:
    if value is None:
        return "None"
    if isinstance(value, str) and not value.strip():
        return "empty string"
    return str(value)


class ValidationService:
    def validate_numeric(self, value: Any, field_name: str) -> ValidationResult:
        if value is None or isinstance(value, bool):
            return _failure(field_name, "numeric", _render(value))
        text = str(value).strip()
        if not text:
            return _failure(field_name, "numeric", "empty string")
        try:
            number = float(text)
        except ValueError:
            return _failure(field_name, "numeric", value)
        if not math.isfinite(number):
            return _failure(field_name, "numeric", value)
        return ValidationResult(is_valid=True, value=text)

    def validate_date(self, value: Any, field_name: str) -> ValidationResult:
        """Accepts YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS[.sss][Z|+HH:MM], calendar-checked."""
        expected = "ISO 8601 date"
        if value is None:
            return _failure(field_name, expected, "None")
        text = str(value).strip()
        if not text:
            return _failure(field_name, expected, "empty string")

        match = _DATE_RE.match(text) or _DATETIME_RE.match(text)
        if not match:
            return _failure(field_name, expected, value)

        year, month, day = (int(g) for g in match.groups()[:3])
        try:
            date(year, month, day)
        except ValueError:
            return _failure(field_name, expected, value)
        if len(match.groups()) > 3:
            hour, minute, second = (int(g) for g in match.groups()[3:6])
            if hour > 23 or minute > 59 or second > 59:
                return _failure(field_name, expected, value)

        return ValidationResult(is_valid=True, value=text)

    def validate_boolean(self, value: Any, field_name: str) -> ValidationResult:
        """Normalize true/false, 1/0 and their string forms to "1"/"0"."""
        if value is None:
            return _failure(field_name, "boolean", "None")
        if isinstance(value, bool):
            return ValidationResult(is_valid=True, value="1" if value else "0")
        if isinstance(value, (int, float)):
            if value in (0, 1):
                return ValidationResult(is_valid=True, value=str(int(value)))
            return _failure(field_name, "boolean", value)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("true", "1"):
                return ValidationResult(is_valid=True, value="1")
            if lowered in ("false", "0"):
                return ValidationResult(is_valid=True, value="0")
        return _failure(field_name, "boolean", value)

    def validate_client_id(self, value: Any) -> ValidationResult:
        expected = "positive INTEGER"
        if value is None or isinstance(value, bool):
            return _failure("client_id", expected, _render(value))
        try:
            number = float(str(value).strip())
        except ValueError:
            return _failure("client_id", expected, value)
        if not number.is_integer() or number <= 0:
            return _failure("client_id", expected, value)
        return ValidationResult(is_valid=True, value=int(number))

    def validate_record(self, record: Mapping[str, Any], schema: Mapping[str, str]) -> ValidationResult:
        """Validate every field named in `schema`; absent or None values are skipped."""
        errors: List[str] = []
        validated: Dict[str, Any] = {}

        for field_name, expected_type in schema.items():
            value = record.get(field_name)
            if value is None:
                continue

            if expected_type == "numeric":
                result = self.validate_numeric(value, field_name)
            elif expected_type == "date":
                result = self.validate_date(value, field_name)
            elif expected_type == "boolean":
                result = self.validate_boolean(value, field_name)
            elif expected_type == "text":
                result = ValidationResult(is_valid=True, value=str(value))
            else:
                result = ValidationResult(
                    is_valid=False, errors=[f"Unknown type '{expected_type}' for field '{field_name}'"]
                )

            if result.is_valid:
                validated[field_name] = result.value
            else:
                errors.extend(result.errors)

        return ValidationResult(is_valid=not errors, value=validated, errors=errors)

    def ensure(self, result: ValidationResult, field_name: str, expected_type: str, value: Any) -> Any:
        """Return the normalized value or raise ValueValidationError."""
        if not result.is_valid:
            raise ValueValidationError(field_name, expected_type, value)
        return result.value


validation_service = ValidationService()

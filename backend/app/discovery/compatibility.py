# backend/app/discovery/compatibility.py
"""
Compatibility checks between stored form definitions and live data.

(a) `check_field`: has the column behind a stored field drifted?
(b) `check_form_for_client`: does a client have values for every required field?
(c) `compare_forms`: what happens to a client's data when switching templates?

All three are read-only, single-shot evaluations.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping

from app.discovery.field_normalizer import classify_data_type
from app.discovery.schema_provider import TableSchemaProvider
from app.schemas.field import AvailableField, CompatibilityResult
from app.schemas.form import FormCard, FormClientCompatibility, FormField, FormSwitchReport
from app.schemas.table import ColumnDefinition
from settings import FieldDiscoveryConfig

logger = logging.getLogger("uvicorn")


def _js_bool(value: bool) -> str:
    return "true" if value else "false"


def _has_value(client_data: Mapping[str, Any], key: str) -> bool:
    value = client_data.get(key)
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def _fields_by_key(cards: Iterable[FormCard]) -> Dict[str, FormField]:
    """Flatten cards to 'table.column' -> field; the first occurrence wins."""
    fields: Dict[str, FormField] = {}
    for card in sorted(cards, key=lambda c: c.order):
        for field in sorted(card.fields, key=lambda f: f.order):
            fields.setdefault(field.key, field)
    return fields


def suitability_warnings(field: AvailableField) -> List[str]:
    warnings = []
    if field.metadata.is_system_field and field.column_name != "client_id":
        warnings.append("System field may not be suitable for user input")
    max_length = field.constraints.max_length
    if max_length and max_length > FieldDiscoveryConfig.LONG_TEXT_THRESHOLD:
        warnings.append("Very long text field may need special handling in forms")
    if field.data_type == "TEXT" and "blob" in field.column_name.lower():
        warnings.append("Binary data field may not be suitable for form input")
    return warnings


def drift_warnings(field: AvailableField, column: ColumnDefinition) -> List[str]:
    warnings = []
    live_type = classify_data_type(column.type)
    if live_type != field.data_type:
        warnings.append(f"Data type changed from '{field.data_type}' to '{live_type}'")
    if column.nullable != field.is_nullable:
        warnings.append(
            f"Nullable constraint changed from {_js_bool(field.is_nullable)} to {_js_bool(column.nullable)}"
        )
    if column.primary_key != field.constraints.is_primary_key:
        warnings.append("Primary key constraint changed")
    if (column.foreign_key is not None) != field.constraints.is_foreign_key:
        warnings.append("Foreign key constraint changed")
    return warnings


class CompatibilityChecker:
    def __init__(self, schema_provider: TableSchemaProvider):
        self.provider = schema_provider

    async def check_field(self, field: AvailableField) -> CompatibilityResult:
        """Compare a previously captured field against the live schema."""
        try:
            if not await self.provider.table_exists(field.table_name):
                return CompatibilityResult(
                    is_compatible=False,
                    errors=[f"Table '{field.table_name}' no longer exists"],
                )

            table_schema = await self.provider.get_table_schema(field.table_name)
            if table_schema is None:
                return CompatibilityResult(
                    is_compatible=False,
                    errors=[f"Cannot access table schema for '{field.table_name}'"],
                )

            column = table_schema.get_column(field.column_name)
            if column is None:
                return CompatibilityResult(
                    is_compatible=False,
                    errors=[f"Column '{field.column_name}' no longer exists in table '{field.table_name}'"],
                )

            result = CompatibilityResult(
                warnings=drift_warnings(field, column) + suitability_warnings(field)
            )
            logger.info(f"🔍 Field compatibility check for {field.id}: compatible, {len(result.warnings)} warnings")
            return result

        except Exception as e:
            logger.error(f"❌ Error validating field compatibility for {field.id}: {e}")
            return CompatibilityResult(is_compatible=False, errors=[f"Validation error: {e}"])

    def check_form_for_client(
        self, cards: Iterable[FormCard], client_data: Mapping[str, Any]
    ) -> FormClientCompatibility:
        """Every required field of the layout must have a value in the client's flat data."""
        missing = [
            field.display_name
            for field in _fields_by_key(cards).values()
            if field.is_required and not _has_value(client_data, field.key)
        ]
        if missing:
            logger.warning(f"⚠️ Client data is missing {len(missing)} required fields: {missing}")
        return FormClientCompatibility(is_compatible=not missing, missing_fields=missing)

    def compare_forms(
        self,
        previous_cards: Iterable[FormCard],
        new_cards: Iterable[FormCard],
        client_data: Mapping[str, Any],
    ) -> FormSwitchReport:
        """
        Partition the previous form's fields into missing / incompatible / preserved.

        A dropped field is only missing when the client has data in it.
        """
        previous = _fields_by_key(previous_cards)
        new = _fields_by_key(new_cards)
        report = FormSwitchReport()

        for key, old_field in previous.items():
            new_field = new.get(key)
            if new_field is None:
                if _has_value(client_data, key):
                    report.missing_fields.append(key)
                    report.warnings.append(f"Data in {key} will not be visible in the new form")
                else:
                    # nothing stored, so nothing is hidden by dropping it
                    report.preserved_fields.append(key)
            elif new_field.field_type != old_field.field_type:
                report.incompatible_fields.append(key)
                report.warnings.append(
                    f"Field {key} changed type from '{old_field.field_type}' to '{new_field.field_type}'"
                )
            else:
                report.preserved_fields.append(key)

        for key in new:
            if key not in previous and not _has_value(client_data, key):
                report.warnings.append(f"New field {key} will be empty and may need data entry")

        report.is_compatible = not report.missing_fields and not report.incompatible_fields
        logger.info(
            f"🔍 Form switch: {len(report.preserved_fields)} preserved, "
            f"{len(report.missing_fields)} hidden, {len(report.incompatible_fields)} incompatible"
        )
        return report

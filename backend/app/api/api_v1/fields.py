# backend/app/api/api_v1/fields.py
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_compatibility_checker, get_field_catalog, get_performance_monitor
from app.core.exceptions import InputValidationError
from app.discovery import CompatibilityChecker, FieldCatalogService
from app.schemas import (
    AvailableField,
    CompatibilityResult,
    FieldListResponse,
    FieldMetadata,
    FieldSearchResponse,
    GroupedFieldsResponse,
    GroupedFieldsSummary,
    TableFieldsResponse,
)
from app.services import PerformanceMonitor

router = APIRouter()


# ---------- Helpers ----------
def _grouped(groups: Dict[str, List[AvailableField]]) -> GroupedFieldsResponse:
    counts = {name: len(fields) for name, fields in groups.items()}
    return GroupedFieldsResponse(
        groups=groups,
        summary=GroupedFieldsSummary(
            total_groups=len(groups),
            total_fields=sum(counts.values()),
            counts=counts,
        ),
    )


# ---------- Endpoints ----------
@router.get("/fields", response_model=FieldListResponse)
async def list_fields(
    catalog: FieldCatalogService = Depends(get_field_catalog),
    monitor: PerformanceMonitor = Depends(get_performance_monitor),
):
    """All form-builder fields across every discoverable table."""
    with monitor.track("list_all_fields"):
        fields = await catalog.list_all_fields()
    return FieldListResponse(fields=fields, count=len(fields))


@router.get("/fields/table/{table_name}", response_model=TableFieldsResponse)
async def list_table_fields(
    table_name: str,
    catalog: FieldCatalogService = Depends(get_field_catalog),
    monitor: PerformanceMonitor = Depends(get_performance_monitor),
):
    with monitor.track("list_fields_for_table", {"tableName": table_name}):
        fields = await catalog.list_fields_for_table(table_name)
    return TableFieldsResponse(table_name=table_name, fields=fields, count=len(fields))


@router.get("/fields/grouped/table", response_model=GroupedFieldsResponse)
async def fields_grouped_by_table(catalog: FieldCatalogService = Depends(get_field_catalog)):
    return _grouped(await catalog.group_by_table())


@router.get("/fields/grouped/category", response_model=GroupedFieldsResponse)
async def fields_grouped_by_category(catalog: FieldCatalogService = Depends(get_field_catalog)):
    return _grouped(await catalog.group_by_category())


@router.get("/fields/search", response_model=FieldSearchResponse)
async def search_fields(
    q: str = Query("", description="Search term"),
    table: Optional[str] = Query(None, description="Restrict the search to one table"),
    catalog: FieldCatalogService = Depends(get_field_catalog),
):
    if not q.strip():
        raise InputValidationError("Search query is required", details={"q": q})
    fields = await catalog.search(q, table)
    return FieldSearchResponse(query=q, table_filter=table, fields=fields, count=len(fields))


@router.get("/fields/{table_name}/{column_name}/metadata", response_model=FieldMetadata)
async def field_metadata(
    table_name: str,
    column_name: str,
    catalog: FieldCatalogService = Depends(get_field_catalog),
):
    return await catalog.field_metadata(table_name, column_name)


@router.post("/fields/validate", response_model=CompatibilityResult)
async def validate_field(
    field: AvailableField,
    checker: CompatibilityChecker = Depends(get_compatibility_checker),
):
    """Check a previously captured field against the live schema."""
    return await checker.check_field(field)


@router.post("/fields/cache/clear")
def clear_field_cache(catalog: FieldCatalogService = Depends(get_field_catalog)):
    catalog.clear_cache()
    return {"ok": True, "message": "Field discovery cache cleared"}

# backend/app/api/api_v1/tables.py
from fastapi import APIRouter, Depends

from app.api.deps import get_schema_provider
from app.core.exceptions import NotFoundError
from app.discovery import SqlAlchemySchemaProvider
from app.schemas import TableExistsResponse, TableListResponse, TableSchema

router = APIRouter()


@router.get("/database/tables", response_model=TableListResponse)
async def list_tables(provider: SqlAlchemySchemaProvider = Depends(get_schema_provider)):
    tables = await provider.list_tables()
    return TableListResponse(tables=tables, count=len(tables))


@router.get("/database/tables/profile-related", response_model=TableListResponse)
async def list_profile_tables(provider: SqlAlchemySchemaProvider = Depends(get_schema_provider)):
    """Tables keyed by client_id: personal_details first, documents last."""
    tables = await provider.profile_tables()
    return TableListResponse(tables=tables, count=len(tables))


@router.get("/database/tables/{table_name}/exists", response_model=TableExistsResponse)
async def table_exists(table_name: str, provider: SqlAlchemySchemaProvider = Depends(get_schema_provider)):
    return TableExistsResponse(table_name=table_name, exists=await provider.table_exists(table_name))


@router.get("/database/tables/{table_name}/schema", response_model=TableSchema)
async def table_schema(table_name: str, provider: SqlAlchemySchemaProvider = Depends(get_schema_provider)):
    schema = await provider.get_table_schema(table_name)
    if schema is None:
        raise NotFoundError("Table", table_name)
    return schema

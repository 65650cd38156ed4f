# backend/app/api/api_v1/forms.py
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.api.deps import get_compatibility_checker, get_schema_provider
from app.core.database import get_db
from app.core.exceptions import InputValidationError
from app.crud import form_template_crud
from app.crud.form_template import parse_cards
from app.discovery import CompatibilityChecker, SqlAlchemySchemaProvider
from app.schemas import (
    CompareFormsRequest,
    CreateFormRequest,
    DuplicateFormRequest,
    FormClientCompatibility,
    FormCompatibilityRequest,
    FormDataResponse,
    FormSwitchReport,
    FormTemplateResponse,
    UpdateFormRequest,
)

router = APIRouter()


# ---------- Helpers ----------
async def _client_data(
    db: Session,
    provider: SqlAlchemySchemaProvider,
    client_id: Optional[int],
    client_data: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    """Explicit client data wins; otherwise read the client's rows from every profile table."""
    if client_data is not None:
        return client_data
    if client_id is None:
        raise InputValidationError("Either clientId or clientData is required")

    schemas = []
    for table_name in await provider.profile_tables():
        schema = await provider.get_table_schema(table_name)
        if schema is not None:
            schemas.append(schema)
    return await run_in_threadpool(form_template_crud.get_client_data_map, db, client_id, schemas)


# ---------- Template store ----------
@router.get("/forms", response_model=List[FormTemplateResponse])
def list_forms(db: Session = Depends(get_db)):
    return form_template_crud.get_all(db)


@router.post("/forms", response_model=FormTemplateResponse, status_code=status.HTTP_201_CREATED)
def create_form(payload: CreateFormRequest, db: Session = Depends(get_db)):
    form = form_template_crud.create(db, payload)
    return form_template_crud.to_dict(form, with_field_count=True)


@router.delete("/forms")
def clear_forms(db: Session = Depends(get_db)):
    """Remove every template (development helper)."""
    return {"ok": True, "deleted": form_template_crud.clear_all(db)}


@router.post("/forms/compare", response_model=FormSwitchReport)
async def compare_forms(
    payload: CompareFormsRequest,
    db: Session = Depends(get_db),
    provider: SqlAlchemySchemaProvider = Depends(get_schema_provider),
    checker: CompatibilityChecker = Depends(get_compatibility_checker),
):
    """What a client's data looks like after switching from one template to another."""
    previous = await run_in_threadpool(form_template_crud.get_or_404, db, payload.previous_form_id)
    new = await run_in_threadpool(form_template_crud.get_or_404, db, payload.new_form_id)
    client_data = await _client_data(db, provider, payload.client_id, payload.client_data)
    return checker.compare_forms(parse_cards(previous.cards), parse_cards(new.cards), client_data)


@router.get("/forms/{form_id}", response_model=FormTemplateResponse)
def get_form(form_id: str, db: Session = Depends(get_db)):
    form = form_template_crud.get_or_404(db, form_id)
    return form_template_crud.to_dict(form, with_field_count=True)


@router.put("/forms/{form_id}", response_model=FormTemplateResponse)
def update_form(form_id: str, payload: UpdateFormRequest, db: Session = Depends(get_db)):
    form = form_template_crud.update(db, form_id, payload)
    return form_template_crud.to_dict(form, with_field_count=True)


@router.delete("/forms/{form_id}")
def delete_form(form_id: str, db: Session = Depends(get_db)):
    form_template_crud.delete(db, form_id)
    return {"ok": True, "id": form_id}


@router.post("/forms/{form_id}/duplicate", response_model=FormTemplateResponse, status_code=status.HTTP_201_CREATED)
def duplicate_form(form_id: str, payload: DuplicateFormRequest, db: Session = Depends(get_db)):
    form = form_template_crud.duplicate(db, form_id, payload.name, payload.created_by)
    return form_template_crud.to_dict(form, with_field_count=True)


@router.get("/forms/{form_id}/client/{client_id}", response_model=FormDataResponse)
def get_form_for_client(form_id: str, client_id: int, db: Session = Depends(get_db)):
    """The form's cards with the client's stored value in every field."""
    return form_template_crud.get_form_data_for_client(db, form_id, client_id)


@router.post("/forms/{form_id}/compatibility", response_model=FormClientCompatibility)
async def check_form_compatibility(
    form_id: str,
    payload: FormCompatibilityRequest,
    db: Session = Depends(get_db),
    provider: SqlAlchemySchemaProvider = Depends(get_schema_provider),
    checker: CompatibilityChecker = Depends(get_compatibility_checker),
):
    form = await run_in_threadpool(form_template_crud.get_or_404, db, form_id)
    client_data = await _client_data(db, provider, payload.client_id, payload.client_data)
    return checker.check_form_for_client(parse_cards(form.cards), client_data)

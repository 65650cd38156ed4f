# backend/app/crud/form_template.py
import json
import logging
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import MetaData, Table, select, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    ConflictError,
    ForeignKeyError,
    InputValidationError,
    NotFoundError,
)
from app.models import FormTemplate
from app.schemas.form import CreateFormRequest, FormCard, UpdateFormRequest
from app.schemas.table import TableSchema
from app.services.profile_data import ProfileData, schema_from_tables

logger = logging.getLogger("uvicorn")

_BASE36 = string.digits + string.ascii_lowercase

DOCUMENTS_TABLE = "documents"
DOCUMENT_PLACEHOLDERS = {
    "document_type": "Not specified",
    "document_name": "No document uploaded",
    "upload_date": "Not uploaded",
    "verification_status": "Pending",
}
DOCUMENT_DEFAULT_PLACEHOLDER = "Not available"
DOCUMENT_ERROR_PLACEHOLDER = "Error loading document data"


def new_form_id() -> str:
    """form_<epoch ms>_<9 random base36 chars>"""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"form_{int(time.time() * 1000)}_{suffix}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Any) -> str:
    return value.isoformat() if isinstance(value, datetime) else str(value)


def _dump_cards(cards: List[FormCard]) -> str:
    return json.dumps([card.model_dump(by_alias=True, exclude_none=True) for card in cards])


def parse_cards(raw: str) -> List[FormCard]:
    return [FormCard.model_validate(card) for card in json.loads(raw)]


def count_fields(raw: str) -> int:
    return sum(len(card.get("fields") or []) for card in json.loads(raw))


class FormTemplateCRUD:
    """Database operations for form templates and rendering them with client data."""

    def to_dict(self, form: FormTemplate, with_field_count: bool = False) -> dict:
        data = {
            "id": form.id,
            "name": form.name,
            "cards": form.cards,
            "created_at": _iso(form.created_at),
            "updated_at": _iso(form.updated_at),
            "created_by": form.created_by,
        }
        if with_field_count:
            try:
                data["field_count"] = count_fields(form.cards)
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning(f"⚠️ Error parsing cards for form {form.id}: {e}")
                data["field_count"] = 0
        return data

    # ---------- Reads ----------

    def get_all(self, db: Session) -> List[dict]:
        forms = db.scalars(select(FormTemplate).order_by(FormTemplate.updated_at.desc())).all()
        return [self.to_dict(f, with_field_count=True) for f in forms]

    def get(self, db: Session, form_id: str) -> Optional[FormTemplate]:
        if not form_id:
            raise InputValidationError("Form ID is required")
        return db.get(FormTemplate, form_id)

    def get_or_404(self, db: Session, form_id: str) -> FormTemplate:
        form = self.get(db, form_id)
        if form is None:
            raise NotFoundError("Form", form_id)
        return form

    def _name_taken(self, db: Session, name: str, exclude_id: Optional[str] = None) -> bool:
        query = select(FormTemplate.id).where(FormTemplate.name == name)
        if exclude_id:
            query = query.where(FormTemplate.id != exclude_id)
        return db.scalar(query) is not None

    # ---------- Writes ----------

    def create(self, db: Session, request: CreateFormRequest) -> FormTemplate:
        if not request.name or not request.name.strip() or request.cards is None or not request.created_by:
            raise InputValidationError("Name, cards, and created_by are required")

        if self._name_taken(db, request.name):
            raise ConflictError(f"Form with name '{request.name}' already exists", resource="form")

        now = _utcnow()
        form = FormTemplate(
            id=new_form_id(),
            name=request.name,
            cards=_dump_cards(request.cards),
            created_by=request.created_by,
            created_at=now,
            updated_at=now,
        )
        db.add(form)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise ConflictError(f"Form with name '{request.name}' already exists", resource="form") from e
        db.refresh(form)
        logger.info(f"✅ Form '{form.id}' created ({request.name})")
        return form

    def update(self, db: Session, form_id: str, request: UpdateFormRequest) -> FormTemplate:
        form = self.get_or_404(db, form_id)

        rename = request.name is not None and request.name != form.name
        if rename and self._name_taken(db, request.name, exclude_id=form_id):
            raise ConflictError(f"Form with name '{request.name}' already exists", resource="form")
        if not rename and request.cards is None:
            raise InputValidationError("No fields to update")

        if rename:
            form.name = request.name
        if request.cards is not None:
            form.cards = _dump_cards(request.cards)
        form.updated_at = _utcnow()

        db.add(form)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise ConflictError(f"Form with name '{request.name}' already exists", resource="form") from e
        db.refresh(form)
        logger.info(f"✅ Form '{form_id}' updated")
        return form

    def delete(self, db: Session, form_id: str) -> None:
        form = self.get_or_404(db, form_id)
        db.delete(form)
        db.commit()
        logger.info(f"✅ Form '{form_id}' deleted")

    def duplicate(self, db: Session, form_id: str, new_name: str, created_by: str) -> FormTemplate:
        if not form_id or not new_name or not created_by:
            raise InputValidationError("Form ID, new name, and created_by are required")
        original = self.get_or_404(db, form_id)
        try:
            cards = parse_cards(original.cards)
        except ValueError as e:
            raise InputValidationError("Invalid cards format in original form") from e

        copy = self.create(db, CreateFormRequest(name=new_name, cards=cards, created_by=created_by))
        logger.info(f"✅ Form '{form_id}' duplicated as '{copy.id}'")
        return copy

    def clear_all(self, db: Session) -> int:
        result = db.execute(delete(FormTemplate))
        db.commit()
        logger.info(f"🧹 Cleared {result.rowcount} forms")
        return result.rowcount

    # ---------- Client data ----------

    def _reflect(self, db: Session, table_name: str, tables: Dict[str, Table]) -> Table:
        if table_name not in tables:
            tables[table_name] = Table(table_name, MetaData(), autoload_with=db.get_bind())
        return tables[table_name]

    def _read_client_value(self, db: Session, table: Table, column_name: str, client_id: int) -> Any:
        if column_name not in table.c or "client_id" not in table.c:
            raise KeyError(f"{table.name}.{column_name} is not a client column")
        query = select(table.c[column_name]).where(table.c.client_id == client_id).limit(1)
        return db.execute(query).scalar()

    def get_form_data_for_client(self, db: Session, form_id: str, client_id: int) -> dict:
        """Render every card of a form with the client's stored values."""
        form = self.get_or_404(db, form_id)
        tables: Dict[str, Table] = {}
        rendered_cards = []

        for card in parse_cards(form.cards):
            rendered_fields = []
            for field in card.fields:
                value = None
                is_available = False
                try:
                    table = self._reflect(db, field.table_name, tables)
                    value = self._read_client_value(db, table, field.column_name, client_id)
                    is_available = value is not None
                    if not is_available and field.table_name == DOCUMENTS_TABLE:
                        value = DOCUMENT_PLACEHOLDERS.get(field.column_name, DOCUMENT_DEFAULT_PLACEHOLDER)
                except (SQLAlchemyError, KeyError) as e:
                    db.rollback()
                    logger.warning(f"⚠️ Error getting field value for {field.key}: {e}")
                    value = DOCUMENT_ERROR_PLACEHOLDER if field.table_name == DOCUMENTS_TABLE else None

                rendered = field.model_dump()
                rendered.update(
                    value=value,
                    is_available=is_available,
                    enable_copy=is_available and field.enable_copy is not False,
                )
                rendered_fields.append(rendered)

            rendered_cards.append({
                "id": card.id,
                "title": card.title,
                "description": card.description,
                "order": card.order,
                "fields": rendered_fields,
            })

        return {
            "form_id": form.id,
            "form_name": form.name,
            "client_id": client_id,
            "cards": rendered_cards,
        }

    def get_client_data_map(self, db: Session, client_id: int, table_schemas: List[TableSchema]) -> Dict[str, Any]:
        """Flat 'table.column' -> value map of the client's rows across profile tables."""
        tables: Dict[str, Table] = {}
        rows: Dict[str, Dict[str, Any]] = {}

        for schema in table_schemas:
            if schema.get_column("client_id") is None:
                continue
            try:
                table = self._reflect(db, schema.table_name, tables)
                row = db.execute(select(table).where(table.c.client_id == client_id).limit(1)).mappings().first()
            except SQLAlchemyError as e:
                db.rollback()
                logger.warning(f"⚠️ Could not read {schema.table_name} for client {client_id}: {e}")
                continue
            if row is not None:
                rows[schema.table_name] = dict(row)

        declared = {s.table_name for s in table_schemas}
        if "personal_details" in declared and "personal_details" not in rows:
            raise ForeignKeyError("personal_details", client_id)

        profile = ProfileData.from_rows(schema_from_tables(table_schemas), rows, strict=False)
        return profile.to_flat()


# Create instance
form_template_crud = FormTemplateCRUD()

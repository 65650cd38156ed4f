# backend/app/schemas/form.py
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.base import CamelModel


# --- Form layout ---
class FormField(CamelModel):
    id: str
    table_name: str
    column_name: str
    display_name: str
    field_type: str
    order: int = 0
    is_required: Optional[bool] = None
    enable_copy: Optional[bool] = None

    @property
    def key(self) -> str:
        return f"{self.table_name}.{self.column_name}"


class FormCard(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    order: int = 0
    card_type: Literal["normal", "document"] = "normal"
    fields: List[FormField] = Field(default_factory=list)


# --- Template store (snake_case, as persisted) ---
class CreateFormRequest(BaseModel):
    name: str
    cards: List[FormCard]
    created_by: str

class UpdateFormRequest(BaseModel):
    name: Optional[str] = None
    cards: Optional[List[FormCard]] = None
    updated_by: Optional[str] = None

class DuplicateFormRequest(BaseModel):
    name: str
    created_by: str

class FormTemplateResponse(BaseModel):
    id: str
    name: str
    cards: str  # JSON array of cards, kept as stored
    created_at: str
    updated_at: str
    created_by: str
    field_count: Optional[int] = None


# --- Rendering a form for a client ---
class RenderedField(FormField):
    value: Any = None
    is_available: bool = False

class RenderedCard(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    order: int = 0
    fields: List[RenderedField] = Field(default_factory=list)

class FormDataResponse(CamelModel):
    form_id: str
    form_name: str
    client_id: int
    cards: List[RenderedCard]


# --- Compatibility ---
class FormClientCompatibility(CamelModel):
    is_compatible: bool = True
    missing_fields: List[str] = Field(default_factory=list)

class FormSwitchReport(CamelModel):
    is_compatible: bool = True
    missing_fields: List[str] = Field(default_factory=list)
    incompatible_fields: List[str] = Field(default_factory=list)
    preserved_fields: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

class FormCompatibilityRequest(CamelModel):
    client_id: Optional[int] = None
    client_data: Optional[Dict[str, Any]] = None

class CompareFormsRequest(CamelModel):
    previous_form_id: str
    new_form_id: str
    client_id: Optional[int] = None
    client_data: Optional[Dict[str, Any]] = None

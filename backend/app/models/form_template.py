# File: app/models/form_template.py
from sqlalchemy import String, Text, DateTime, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base

class FormTemplate(Base):
    __tablename__ = "form_templates"
    __table_args__ = (
        UniqueConstraint("name", name="uq_form_templates_name"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)  # form_<epoch_ms>_<9 base36 chars>
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    cards: Mapped[str] = mapped_column(Text, nullable=False)  # JSON array of cards with fields
    created_by: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

# backend/app/crud/__init__.py
from .form_template import form_template_crud

__all__ = ["form_template_crud"]

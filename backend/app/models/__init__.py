# File: app/models/__init__.py
from .base import Base
from .form_template import FormTemplate

__all__ = [
    "Base",
    "FormTemplate",
]

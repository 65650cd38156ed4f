from fastapi import APIRouter
from app.api.api_v1 import fields, tables
from app.api.api_v1 import forms
from app.api.api_v1 import admin, performance


api_router = APIRouter()

api_router.include_router(fields.router, prefix="", tags=["fields"])
api_router.include_router(tables.router, prefix="", tags=["tables"])
api_router.include_router(forms.router, prefix="", tags=["forms"])
api_router.include_router(admin.router, prefix="", tags=["admin"])
api_router.include_router(performance.router, prefix="", tags=["performance"])

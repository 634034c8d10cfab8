"""
StockEasy - Checklist Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional

from app.models.checklist import ChecklistType


class TemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: ChecklistType
    is_active: bool = True
    company_id: Optional[int] = None


class TemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[ChecklistType] = None
    is_active: Optional[bool] = None
    company_id: Optional[int] = None


class ItemCreate(BaseModel):
    template_id: Optional[int] = None
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    estimated_minutes: int = Field(5, ge=0)
    order: int = 0
    is_required: bool = True


class ItemUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    estimated_minutes: Optional[int] = Field(None, ge=0)
    order: Optional[int] = None
    is_required: Optional[bool] = None


class ExecutionStart(BaseModel):
    template_id: int
    notes: Optional[str] = None


class ExecutionItemToggle(BaseModel):
    is_completed: bool
    notes: Optional[str] = None


class ExecutionComplete(BaseModel):
    notes: Optional[str] = None

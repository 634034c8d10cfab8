"""
StockEasy - Catalog Schemas
Categorias, fornecedores e produtos
"""
from decimal import Decimal
from enum import Enum
from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class WeekDay(str, Enum):
    SEGUNDA = "segunda"
    TERCA = "terca"
    QUARTA = "quarta"
    QUINTA = "quinta"
    SEXTA = "sexta"
    SABADO = "sabado"
    DOMINGO = "domingo"


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    company_id: Optional[int] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    company_id: Optional[int] = None


class SupplierCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    company_id: Optional[int] = None


class SupplierUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    company_id: Optional[int] = None


class ProductCreate(BaseModel):
    """Estoque inicial sempre 0; entradas passam pelo ledger"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    unit: str = Field(..., min_length=1, max_length=20)
    min_stock: int = Field(1, ge=0)
    max_stock: Optional[int] = Field(None, ge=0)
    cost_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    supplier_id: Optional[int] = None
    category_id: Optional[int] = None
    best_purchase_day: Optional[WeekDay] = None
    company_id: Optional[int] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    unit: Optional[str] = Field(None, min_length=1, max_length=20)
    min_stock: Optional[int] = Field(None, ge=0)
    max_stock: Optional[int] = Field(None, ge=0)
    cost_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    supplier_id: Optional[int] = None
    category_id: Optional[int] = None
    best_purchase_day: Optional[WeekDay] = None
    company_id: Optional[int] = None


class StockAdjustRequest(BaseModel):
    new_stock: int = Field(..., ge=0)
    notes: Optional[str] = None

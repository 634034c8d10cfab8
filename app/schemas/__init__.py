from .company import CompanyCreate, CompanyUpdate, CompanyResponse
from .auth import LoginRequest, TokenResponse, SignupRequest, ChangePasswordRequest
from .user import UserCreate, UserUpdate, UserResponse, AssignCompanyRequest
from .catalog import (
    CategoryCreate,
    CategoryUpdate,
    SupplierCreate,
    SupplierUpdate,
    ProductCreate,
    ProductUpdate,
    StockAdjustRequest
)
from .movement import MovementCreate
from .checklist import (
    TemplateCreate,
    TemplateUpdate,
    ItemCreate,
    ItemUpdate,
    ExecutionStart,
    ExecutionItemToggle,
    ExecutionComplete
)

__all__ = [
    "CompanyCreate",
    "CompanyUpdate",
    "CompanyResponse",
    "LoginRequest",
    "TokenResponse",
    "SignupRequest",
    "ChangePasswordRequest",
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "AssignCompanyRequest",
    "CategoryCreate",
    "CategoryUpdate",
    "SupplierCreate",
    "SupplierUpdate",
    "ProductCreate",
    "ProductUpdate",
    "StockAdjustRequest",
    "MovementCreate",
    "TemplateCreate",
    "TemplateUpdate",
    "ItemCreate",
    "ItemUpdate",
    "ExecutionStart",
    "ExecutionItemToggle",
    "ExecutionComplete"
]

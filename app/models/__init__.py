from .company import Company, CompanyPlan
from .user import User, UserRole
from .catalog import Category, Supplier, Product
from .movement import StockMovement, MovementType
from .checklist import (
    ChecklistTemplate,
    ChecklistItem,
    ChecklistExecution,
    ChecklistExecutionItem,
    ChecklistType
)

__all__ = [
    "Company",
    "CompanyPlan",
    "User",
    "UserRole",
    "Category",
    "Supplier",
    "Product",
    "StockMovement",
    "MovementType",
    "ChecklistTemplate",
    "ChecklistItem",
    "ChecklistExecution",
    "ChecklistExecutionItem",
    "ChecklistType"
]

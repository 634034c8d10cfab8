from .store import (
    ScopedStore,
    CategoryStore,
    SupplierStore,
    ProductStore,
    TemplateStore,
    ItemStore
)
from .accounts import CompanyService, UserStore
from .identity import PrincipalResolver, TokenPrincipalResolver, IdentityService, issue_token
from .ledger import StockLedger
from .checklists import ChecklistService
from .dashboard import DashboardService

__all__ = [
    "ScopedStore",
    "CategoryStore",
    "SupplierStore",
    "ProductStore",
    "TemplateStore",
    "ItemStore",
    "CompanyService",
    "UserStore",
    "PrincipalResolver",
    "TokenPrincipalResolver",
    "IdentityService",
    "issue_token",
    "StockLedger",
    "ChecklistService",
    "DashboardService"
]

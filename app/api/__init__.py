from .auth import router as auth_router
from .companies import router as companies_router
from .master import router as master_router
from .users import router as users_router
from .products import router as products_router
from .catalog import suppliers_router, categories_router
from .movements import router as movements_router
from .checklists import router as checklists_router
from .dashboard import router as dashboard_router, shopping_router

__all__ = [
    "auth_router",
    "companies_router",
    "master_router",
    "users_router",
    "products_router",
    "suppliers_router",
    "categories_router",
    "movements_router",
    "checklists_router",
    "dashboard_router",
    "shopping_router"
]

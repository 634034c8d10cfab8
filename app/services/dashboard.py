"""
StockEasy - Dashboard Service
Indicadores do painel e lista de compras para reposicao.
"""
from datetime import datetime, time

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import settings
from app.core.authorization import Principal, scope_condition
from app.models import Product, StockMovement, Supplier
from app.services.store import ProductStore

NO_SUPPLIER = "Sem Fornecedor"


class DashboardService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, model, *conditions) -> int:
        result = await self.db.execute(
            select(func.count(model.id)).where(*conditions)
        )
        return result.scalar() or 0

    async def stats(self, principal: Principal) -> dict:
        day_start = datetime.combine(datetime.utcnow().date(), time.min)
        product_scope = (scope_condition(principal, Product), Product.is_active.is_(True))

        return {
            "total_products": await self._count(Product, *product_scope),
            "low_stock_count": await self._count(
                Product, *product_scope, Product.current_stock <= Product.min_stock
            ),
            "today_movements": await self._count(
                StockMovement,
                scope_condition(principal, StockMovement),
                StockMovement.created_at >= day_start,
            ),
            "suppliers_count": await self._count(Supplier, scope_condition(principal, Supplier)),
        }

    async def shopping_list(self, principal: Principal) -> dict:
        """Produtos com estoque baixo agrupados por fornecedor, com texto pronto para envio"""
        products = await ProductStore(self.db).low_stock(principal)

        grouped = {}
        for product in products:
            supplier_name = product.supplier.name if product.supplier else NO_SUPPLIER
            grouped.setdefault(supplier_name, []).append(product)

        return {
            "text": format_shopping_list(grouped),
            "grouped_products": {
                name: [p.to_dict() for p in items] for name, items in grouped.items()
            },
        }


def suggested_quantity(product: Product) -> int:
    return product.min_stock * settings.RESTOCK_MULTIPLIER


def format_shopping_list(grouped: dict, today=None) -> str:
    today = today or datetime.now().date()
    lines = ["🛒 LISTA DE COMPRAS", f"📅 Data: {today.strftime('%d/%m/%Y')}", ""]

    for supplier_name, products in grouped.items():
        lines.append(f"🏪 FORNECEDOR: {supplier_name.upper()}")
        for product in products:
            lines.append(
                f"• {product.name} - Qtd: {suggested_quantity(product)} "
                f"(Estoque atual: {product.current_stock})"
            )
        lines.append("")

    lines.append(f"* Quantidades calculadas como {settings.RESTOCK_MULTIPLIER}x o mínimo configurado")
    return "\n".join(lines)

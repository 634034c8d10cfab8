"""
StockEasy - Stock Ledger
Toda alteracao de estoque passa por aqui e gera uma movimentacao.

entrada: estoque += quantidade
saida:   estoque -= quantidade, nunca abaixo de zero
ajuste:  estoque = novo valor, quantidade = |novo - atual|

A movimentacao e a atualizacao do produto ocorrem na mesma transacao.
"""
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import case, select, update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import settings
from app.core.authorization import Principal, scope_condition
from app.core.errors import ValidationError
from app.models import MovementType, Product, StockMovement
from app.services.store import ProductStore

logger = logging.getLogger(__name__)


class StockLedger:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.products = ProductStore(db)

    async def record_movement(self, principal: Principal, product_id: int, type, quantity: int,
                              unit_price: Optional[Decimal] = None, notes: Optional[str] = None) -> StockMovement:
        type = type.value if isinstance(type, MovementType) else type
        if type not in (MovementType.ENTRADA.value, MovementType.SAIDA.value):
            if type == MovementType.AJUSTE.value:
                raise ValidationError("Use o ajuste de estoque para movimentações do tipo ajuste")
            raise ValidationError(f"Tipo de movimentação inválido: {type}")
        if quantity is None or quantity <= 0:
            raise ValidationError("Quantidade deve ser maior que zero")

        product = await self.products.get(principal, product_id)

        if type == MovementType.ENTRADA.value:
            new_value = Product.current_stock + quantity
        else:
            new_value = case(
                (Product.current_stock >= quantity, Product.current_stock - quantity),
                else_=0,
            )

        await self.db.execute(
            sql_update(Product)
            .where(Product.id == product.id)
            .values(current_stock=new_value)
            .execution_options(synchronize_session=False)
        )
        resulting = await self._current_stock(product.id)

        movement = await self._insert(principal, product, type, quantity, unit_price, notes, resulting)
        logger.info(
            f"Movimentacao {type} de {quantity} no produto {product.id} "
            f"(estoque {resulting}) por usuario {principal.principal_id}"
        )
        return movement

    async def adjust_stock(self, principal: Principal, product_id: int, new_stock: int,
                           notes: Optional[str] = None) -> StockMovement:
        if new_stock is None or new_stock < 0:
            raise ValidationError("Estoque não pode ser negativo")

        product = await self.products.get(principal, product_id)

        # Trava a linha enquanto calcula a diferenca (ignorado no SQLite)
        result = await self.db.execute(
            select(Product.current_stock).where(Product.id == product.id).with_for_update()
        )
        current = result.scalar_one()
        quantity = abs(new_stock - current)
        if quantity == 0:
            raise ValidationError("Estoque já está com o valor informado")

        await self.db.execute(
            sql_update(Product)
            .where(Product.id == product.id)
            .values(current_stock=new_stock)
            .execution_options(synchronize_session=False)
        )

        movement = await self._insert(
            principal, product, MovementType.AJUSTE.value, quantity, None,
            notes or f"Ajuste de {current} para {new_stock}", new_stock,
        )
        logger.info(f"Ajuste de estoque do produto {product.id}: {current} -> {new_stock}")
        return movement

    async def _current_stock(self, product_id: int) -> int:
        result = await self.db.execute(select(Product.current_stock).where(Product.id == product_id))
        return result.scalar_one()

    async def _insert(self, principal, product, type, quantity, unit_price, notes, resulting) -> StockMovement:
        total_price = None
        if unit_price is not None:
            unit_price = Decimal(str(unit_price))
            total_price = unit_price * quantity

        movement = StockMovement(
            product_id=product.id,
            type=type,
            quantity=quantity,
            unit_price=unit_price,
            total_price=total_price,
            notes=notes,
            resulting_stock=resulting,
            user_id=principal.principal_id,
            company_id=product.company_id,
        )
        self.db.add(movement)
        await self.db.flush()

        # Produto em memoria ficou desatualizado pelo UPDATE direto
        await self.products.reload(product.id)
        result = await self.db.execute(
            select(StockMovement)
            .where(StockMovement.id == movement.id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def list_movements(self, principal: Principal, limit: Optional[int] = None) -> list:
        limit = limit or settings.MOVEMENTS_DEFAULT_LIMIT
        result = await self.db.execute(
            select(StockMovement)
            .where(scope_condition(principal, StockMovement))
            .order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_for_product(self, principal: Principal, product_id: int) -> list:
        product = await self.products.get(principal, product_id, include_inactive=True)
        result = await self.db.execute(
            select(StockMovement)
            .where(StockMovement.product_id == product.id, scope_condition(principal, StockMovement))
            .order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
        )
        return list(result.scalars().all())

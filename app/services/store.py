"""
StockEasy - Scoped Entity Store
CRUD generico com o predicado de acesso aplicado em toda consulta.

Regras comuns:
- linha fora do escopo do principal se comporta como inexistente (NotFound)
- principal nao-MASTER sempre grava na propria empresa
- MASTER precisa informar a empresa de destino
"""
import logging
from enum import Enum
from typing import Optional

from sqlalchemy import select, update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.authorization import Principal, can_access, scope_condition
from app.core.errors import NotFound, ReferentialError, ValidationError
from app.models import (
    Category,
    ChecklistExecution,
    ChecklistExecutionItem,
    ChecklistItem,
    ChecklistTemplate,
    Company,
    Product,
    Supplier,
)

logger = logging.getLogger(__name__)


def clean_values(data: dict) -> dict:
    """Converte enums para o valor gravado no banco"""
    return {
        key: value.value if isinstance(value, Enum) else value
        for key, value in data.items()
    }


class ScopedStore:
    """Store base. Subclasses definem model, campos obrigatorios e ordenacao"""

    model = None
    label = "Registro"
    required_fields: tuple = ()
    protected_fields: tuple = ("id", "created_at")
    soft_delete = False

    def __init__(self, db: AsyncSession):
        self.db = db

    # === Consultas ===

    def order_by(self):
        return (self.model.id,)

    def base_query(self, principal: Principal, include_inactive: bool = False):
        query = select(self.model).where(scope_condition(principal, self.model))
        if self.soft_delete and not include_inactive:
            query = query.where(self.model.is_active.is_(True))
        return query

    async def list(self, principal: Principal, **filters) -> list:
        query = self.apply_filters(self.base_query(principal), **filters)
        result = await self.db.execute(query.order_by(*self.order_by()))
        return list(result.scalars().all())

    def apply_filters(self, query, **filters):
        return query

    async def find(self, principal: Principal, obj_id: int, include_inactive: bool = False):
        """Como get, mas retorna None"""
        result = await self.db.execute(
            self.base_query(principal, include_inactive).where(self.model.id == obj_id)
        )
        obj = result.scalar_one_or_none()
        if obj is not None and not can_access(principal, obj):
            logger.warning(f"{self.label} {obj_id} fora do escopo do usuario {principal.principal_id}")
            return None
        return obj

    async def get(self, principal: Principal, obj_id: int, include_inactive: bool = False):
        obj = await self.find(principal, obj_id, include_inactive)
        if obj is None:
            raise NotFound(f"{self.label} não encontrado")
        return obj

    async def reload(self, obj_id: int):
        """Recarrega a linha (e relacionamentos) direto do banco"""
        result = await self.db.execute(
            select(self.model)
            .where(self.model.id == obj_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    # === Escrita ===

    async def resolve_company(self, principal: Principal, data: dict) -> Optional[int]:
        """Empresa de destino de um novo registro"""
        if not principal.is_master:
            return principal.company_id

        company_id = data.get("company_id")
        if company_id is None:
            raise ValidationError("MASTER deve informar company_id")
        await self.ensure_company(company_id)
        return company_id

    async def ensure_company(self, company_id: int):
        company = await self.db.get(Company, company_id)
        if company is None:
            raise ValidationError(f"Empresa {company_id} não existe")
        return company

    async def check_references(self, principal: Principal, data: dict, company_id: Optional[int]):
        """Hook para validar chaves estrangeiras"""

    async def reference_in_scope(self, principal: Principal, model, obj_id, company_id, field: str):
        """Referencia deve existir, ser visivel e pertencer a mesma empresa"""
        if obj_id is None:
            return
        query = select(model.id).where(model.id == obj_id, scope_condition(principal, model))
        if company_id is not None and hasattr(model, "company_id"):
            query = query.where(model.company_id == company_id)
        result = await self.db.execute(query)
        if result.scalar_one_or_none() is None:
            raise ReferentialError(f"{field} {obj_id} não existe ou pertence a outra empresa")

    def check_required(self, data: dict):
        missing = [
            field for field in self.required_fields
            if data.get(field) is None or (isinstance(data.get(field), str) and not data[field].strip())
        ]
        if missing:
            raise ValidationError(f"Campos obrigatórios ausentes: {', '.join(missing)}")

    async def create(self, principal: Principal, draft: dict):
        data = clean_values({k: v for k, v in draft.items() if k not in self.protected_fields})
        self.check_required(data)

        company_id = await self.resolve_company(principal, data)
        if hasattr(self.model, "company_id"):
            data["company_id"] = company_id
        else:
            data.pop("company_id", None)

        await self.check_references(principal, data, company_id)

        obj = self.model(**data)
        self.db.add(obj)
        await self.db.flush()
        logger.info(f"{self.label} {obj.id} criado (empresa {company_id}) por usuario {principal.principal_id}")
        return await self.reload(obj.id)

    async def update(self, principal: Principal, obj_id: int, patch: dict):
        obj = await self.get(principal, obj_id)
        data = clean_values({k: v for k, v in patch.items() if k not in self.protected_fields})

        company_id = getattr(obj, "company_id", None)
        if "company_id" in data:
            new_company_id = data["company_id"]
            if new_company_id != company_id:
                if not principal.is_master:
                    raise ValidationError("Não é permitido alterar a empresa do registro")
                if new_company_id is None:
                    raise ValidationError("company_id não pode ser removido")
                await self.ensure_company(new_company_id)
                await self.before_move(obj, new_company_id)
                company_id = new_company_id
            if not hasattr(self.model, "company_id"):
                data.pop("company_id")

        merged = {column.key: getattr(obj, column.key) for column in self.model.__table__.columns}
        merged.update(data)
        self.check_required(merged)

        await self.check_references(principal, self.references_for_update(obj, data), company_id)

        for field, value in data.items():
            setattr(obj, field, value)

        await self.db.flush()
        return await self.reload(obj.id)

    def references_for_update(self, obj, data: dict) -> dict:
        return data

    async def delete(self, principal: Principal, obj_id: int) -> bool:
        obj = await self.find(principal, obj_id)
        if obj is None:
            return False

        if self.soft_delete:
            obj.is_active = False
        else:
            await self.before_delete(obj)
            await self.db.delete(obj)

        await self.db.flush()
        logger.info(f"{self.label} {obj_id} removido por usuario {principal.principal_id}")
        return True

    async def before_delete(self, obj):
        """Hook executado antes da remocao definitiva"""

    async def before_move(self, obj, company_id: int):
        """Hook executado antes de o MASTER mover o registro para outra empresa"""

    async def ensure_unreferenced(self, column, obj_id: int, message: str):
        result = await self.db.execute(select(column).where(column == obj_id).limit(1))
        if result.scalar_one_or_none() is not None:
            raise ReferentialError(message)


class CategoryStore(ScopedStore):
    model = Category
    label = "Categoria"
    required_fields = ("name",)

    def order_by(self):
        return (Category.name, Category.id)

    async def before_move(self, obj, company_id: int):
        await self.ensure_unreferenced(
            Product.category_id, obj.id, "Categoria possui produtos; não pode mudar de empresa"
        )

    async def before_delete(self, obj):
        # Referencia fraca: produtos ficam sem categoria
        await self.db.execute(
            sql_update(Product)
            .where(Product.category_id == obj.id)
            .values(category_id=None)
            .execution_options(synchronize_session="fetch")
        )


class SupplierStore(ScopedStore):
    model = Supplier
    label = "Fornecedor"
    required_fields = ("name",)

    def order_by(self):
        return (Supplier.name, Supplier.id)

    async def before_move(self, obj, company_id: int):
        await self.ensure_unreferenced(
            Product.supplier_id, obj.id, "Fornecedor possui produtos; não pode mudar de empresa"
        )

    async def before_delete(self, obj):
        await self.db.execute(
            sql_update(Product)
            .where(Product.supplier_id == obj.id)
            .values(supplier_id=None)
            .execution_options(synchronize_session="fetch")
        )


class ProductStore(ScopedStore):
    model = Product
    label = "Produto"
    required_fields = ("name", "unit")
    # Estoque so muda pelo ledger
    protected_fields = ("id", "created_at", "updated_at", "current_stock", "is_active")
    soft_delete = True

    def order_by(self):
        return (Product.name, Product.id)

    def apply_filters(self, query, low_stock: bool = False, search: Optional[str] = None,
                      category_id: Optional[int] = None, supplier_id: Optional[int] = None):
        if low_stock:
            query = query.where(Product.current_stock <= Product.min_stock)
        if search:
            query = query.where(Product.name.ilike(f"%{search}%"))
        if category_id is not None:
            query = query.where(Product.category_id == category_id)
        if supplier_id is not None:
            query = query.where(Product.supplier_id == supplier_id)
        return query

    async def low_stock(self, principal: Principal) -> list:
        """Produtos ativos com estoque <= minimo, menor estoque primeiro"""
        query = self.apply_filters(self.base_query(principal), low_stock=True)
        result = await self.db.execute(query.order_by(Product.current_stock, Product.name))
        return list(result.scalars().all())

    def check_required(self, data: dict):
        super().check_required(data)
        min_stock = data.get("min_stock")
        max_stock = data.get("max_stock")
        if min_stock is not None and max_stock is not None and max_stock < min_stock:
            raise ValidationError("Estoque máximo menor que o mínimo")

    def references_for_update(self, obj, data: dict) -> dict:
        # Ao mudar de empresa as referencias atuais tambem precisam ser validas
        return {
            "supplier_id": data.get("supplier_id", obj.supplier_id),
            "category_id": data.get("category_id", obj.category_id),
        }

    async def check_references(self, principal: Principal, data: dict, company_id: Optional[int]):
        await self.reference_in_scope(principal, Supplier, data.get("supplier_id"), company_id, "supplier_id")
        await self.reference_in_scope(principal, Category, data.get("category_id"), company_id, "category_id")


class TemplateStore(ScopedStore):
    model = ChecklistTemplate
    label = "Checklist"
    required_fields = ("name", "type")

    def order_by(self):
        return (ChecklistTemplate.name, ChecklistTemplate.id)

    def apply_filters(self, query, active_only: bool = True, type: Optional[str] = None):
        if active_only:
            query = query.where(ChecklistTemplate.is_active.is_(True))
        if type:
            query = query.where(ChecklistTemplate.type == type)
        return query

    async def before_move(self, obj, company_id: int):
        # Execucoes guardam a empresa de origem
        await self.ensure_unreferenced(
            ChecklistExecution.template_id, obj.id, "Checklist possui execuções; não pode mudar de empresa"
        )

    async def before_delete(self, obj):
        result = await self.db.execute(
            select(ChecklistExecution.id).where(ChecklistExecution.template_id == obj.id).limit(1)
        )
        if result.scalar_one_or_none() is not None:
            # Historico de execucoes referencia o template: desativa em vez de remover
            raise ReferentialError("Checklist possui execuções; desative-o em vez de remover")

        items = await self.db.execute(select(ChecklistItem).where(ChecklistItem.template_id == obj.id))
        for item in items.scalars().all():
            await self.db.delete(item)


class ItemStore(ScopedStore):
    """Itens herdam a empresa do template"""
    model = ChecklistItem
    label = "Item de checklist"
    required_fields = ("template_id", "title")
    protected_fields = ("id", "company_id")

    def order_by(self):
        return (ChecklistItem.order, ChecklistItem.id)

    def apply_filters(self, query, template_id: Optional[int] = None):
        if template_id is not None:
            query = query.where(ChecklistItem.template_id == template_id)
        return query

    async def resolve_company(self, principal: Principal, data: dict) -> Optional[int]:
        template = await TemplateStore(self.db).find(principal, data["template_id"])
        if template is None:
            raise ReferentialError(f"template_id {data['template_id']} não existe ou pertence a outra empresa")
        return template.company_id

    async def update(self, principal: Principal, obj_id: int, patch: dict):
        if "template_id" in patch:
            item = await self.get(principal, obj_id)
            if patch["template_id"] != item.template_id:
                raise ValidationError("Não é permitido mover o item para outro checklist")
        return await super().update(principal, obj_id, patch)

    async def before_delete(self, obj):
        result = await self.db.execute(
            select(ChecklistExecutionItem.id).where(ChecklistExecutionItem.item_id == obj.id).limit(1)
        )
        if result.scalar_one_or_none() is not None:
            raise ReferentialError("Item já utilizado em execuções")

"""
StockEasy - Products API
Produtos, estoque baixo e ajuste de estoque
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.authorization import Principal
from app.core.errors import NotFound
from app.database import get_db
from app.schemas import ProductCreate, ProductUpdate, StockAdjustRequest
from app.services import ProductStore, StockLedger
from .deps import get_current_principal

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("")
async def list_products(
    search: Optional[str] = None,
    category_id: Optional[int] = None,
    supplier_id: Optional[int] = None,
    low_stock: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Lista produtos ativos com fornecedor e categoria"""
    products = await ProductStore(db).list(
        principal,
        search=search,
        category_id=category_id,
        supplier_id=supplier_id,
        low_stock=low_stock,
    )
    return [product.to_dict() for product in products]


@router.get("/low-stock")
async def low_stock_products(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Produtos com estoque <= minimo"""
    return [product.to_dict() for product in await ProductStore(db).low_stock(principal)]


@router.get("/{product_id}")
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    product = await ProductStore(db).get(principal, product_id)
    return product.to_dict()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    request: ProductCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    product = await ProductStore(db).create(principal, request.model_dump())
    await db.commit()
    return product.to_dict()


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    request: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    product = await ProductStore(db).update(principal, product_id, request.model_dump(exclude_unset=True))
    await db.commit()
    return product.to_dict()


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Desativa o produto (historico de movimentacoes e preservado)"""
    if not await ProductStore(db).delete(principal, product_id):
        raise NotFound("Produto não encontrado")
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{product_id}/stock")
async def adjust_stock(
    product_id: int,
    request: StockAdjustRequest,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Ajuste de estoque para o valor informado (gera movimentacao de ajuste)"""
    movement = await StockLedger(db).adjust_stock(principal, product_id, request.new_stock, request.notes)
    await db.commit()
    return movement.to_dict()

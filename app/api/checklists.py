"""
StockEasy - Checklists API
Modelos de checklist, itens e execucoes
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.authorization import Principal
from app.core.errors import NotFound
from app.database import get_db
from app.models import ChecklistType
from app.schemas import (
    ExecutionComplete,
    ExecutionItemToggle,
    ExecutionStart,
    ItemCreate,
    ItemUpdate,
    TemplateCreate,
    TemplateUpdate,
)
from app.services import ChecklistService, ItemStore, TemplateStore
from .deps import get_current_principal

router = APIRouter(prefix="/checklists", tags=["Checklists"])


# === Modelos ===

@router.get("/templates")
async def list_templates(
    type: Optional[ChecklistType] = None,
    active_only: bool = True,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    templates = await TemplateStore(db).list(
        principal, active_only=active_only, type=type.value if type else None
    )
    return [template.to_dict() for template in templates]


@router.get("/templates/{template_id}")
async def get_template(
    template_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    return (await TemplateStore(db).get(principal, template_id)).to_dict()


@router.post("/templates", status_code=status.HTTP_201_CREATED)
async def create_template(
    request: TemplateCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    template = await TemplateStore(db).create(principal, request.model_dump())
    await db.commit()
    return template.to_dict()


@router.put("/templates/{template_id}")
async def update_template(
    template_id: int,
    request: TemplateUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    template = await TemplateStore(db).update(principal, template_id, request.model_dump(exclude_unset=True))
    await db.commit()
    return template.to_dict()


@router.delete("/templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(
    template_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    if not await TemplateStore(db).delete(principal, template_id):
        raise NotFound("Checklist não encontrado")
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# === Itens ===

@router.get("/templates/{template_id}/items")
async def list_items(
    template_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Itens do checklist em ordem"""
    template = await TemplateStore(db).get(principal, template_id)
    items = await ItemStore(db).list(principal, template_id=template.id)
    return [item.to_dict() for item in items]


@router.post("/templates/{template_id}/items", status_code=status.HTTP_201_CREATED)
async def create_item(
    template_id: int,
    request: ItemCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    data = request.model_dump()
    data["template_id"] = template_id
    item = await ItemStore(db).create(principal, data)
    await db.commit()
    return item.to_dict()


@router.put("/items/{item_id}")
async def update_item(
    item_id: int,
    request: ItemUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    item = await ItemStore(db).update(principal, item_id, request.model_dump(exclude_unset=True))
    await db.commit()
    return item.to_dict()


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    if not await ItemStore(db).delete(principal, item_id):
        raise NotFound("Item de checklist não encontrado")
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# === Execucoes ===

@router.get("/executions")
async def list_executions(
    limit: Optional[int] = Query(None, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    executions = await ChecklistService(db).list_executions(principal, limit)
    return [execution.to_dict() for execution in executions]


@router.get("/executions/{execution_id}")
async def get_execution(
    execution_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    return (await ChecklistService(db).get_execution(principal, execution_id)).to_dict()


@router.post("/executions", status_code=status.HTTP_201_CREATED)
async def start_execution(
    request: ExecutionStart,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Inicia uma execucao com todos os itens do checklist"""
    execution = await ChecklistService(db).start(principal, request.template_id, request.notes)
    await db.commit()
    return execution.to_dict()


@router.put("/executions/{execution_id}/items/{item_id}")
async def toggle_execution_item(
    execution_id: int,
    item_id: int,
    request: ExecutionItemToggle,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    execution = await ChecklistService(db).toggle_item(
        principal, execution_id, item_id, request.is_completed, request.notes
    )
    await db.commit()
    return execution.to_dict()


@router.put("/executions/{execution_id}/complete")
async def complete_execution(
    execution_id: int,
    request: Optional[ExecutionComplete] = None,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    execution = await ChecklistService(db).complete(
        principal, execution_id, request.notes if request else None
    )
    await db.commit()
    return execution.to_dict()

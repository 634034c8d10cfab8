"""
StockEasy - Checklist Service
Maquina de estados das execucoes de checklist.

    iniciada --(marcar/desmarcar itens)--> iniciada --(concluir)--> concluida

Execucao concluida e terminal.
"""
import logging
from datetime import datetime, time
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import settings
from app.core.authorization import Principal, scope_condition
from app.core.errors import ConflictError, NotFound, ValidationError
from app.models import ChecklistExecution, ChecklistExecutionItem, ChecklistItem
from app.services.store import TemplateStore

logger = logging.getLogger(__name__)


class ChecklistService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.templates = TemplateStore(db)

    async def _load(self, execution_id: int) -> ChecklistExecution:
        result = await self.db.execute(
            select(ChecklistExecution)
            .where(ChecklistExecution.id == execution_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def start(self, principal: Principal, template_id: int, notes: Optional[str] = None) -> ChecklistExecution:
        template = await self.templates.find(principal, template_id)
        if template is None:
            raise NotFound("Checklist não encontrado")
        if not template.is_active:
            raise ValidationError("Checklist inativo")

        # Uma execucao em andamento por checklist por dia
        day_start = datetime.combine(datetime.utcnow().date(), time.min)
        result = await self.db.execute(
            select(ChecklistExecution.id).where(
                ChecklistExecution.template_id == template.id,
                ChecklistExecution.is_completed.is_(False),
                ChecklistExecution.started_at >= day_start,
            ).limit(1)
        )
        if result.scalar_one_or_none() is not None:
            raise ConflictError("Já existe uma execução em andamento deste checklist hoje")

        execution = ChecklistExecution(
            template_id=template.id,
            user_id=principal.principal_id,
            company_id=template.company_id,
            notes=notes,
        )
        self.db.add(execution)
        await self.db.flush()

        items = await self.db.execute(
            select(ChecklistItem)
            .where(ChecklistItem.template_id == template.id)
            .order_by(ChecklistItem.order, ChecklistItem.id)
        )
        for item in items.scalars().all():
            self.db.add(ChecklistExecutionItem(execution_id=execution.id, item_id=item.id))
        await self.db.flush()

        logger.info(f"Execucao {execution.id} do checklist {template.id} iniciada por usuario {principal.principal_id}")
        return await self._load(execution.id)

    async def get_execution(self, principal: Principal, execution_id: int) -> ChecklistExecution:
        result = await self.db.execute(
            select(ChecklistExecution).where(
                ChecklistExecution.id == execution_id,
                scope_condition(principal, ChecklistExecution),
            )
        )
        execution = result.scalar_one_or_none()
        if execution is None:
            raise NotFound("Execução não encontrada")
        return execution

    async def list_executions(self, principal: Principal, limit: Optional[int] = None) -> list:
        limit = limit or settings.EXECUTIONS_DEFAULT_LIMIT
        result = await self.db.execute(
            select(ChecklistExecution)
            .where(scope_condition(principal, ChecklistExecution))
            .order_by(ChecklistExecution.started_at.desc(), ChecklistExecution.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def toggle_item(self, principal: Principal, execution_id: int, item_id: int,
                          is_completed: bool, notes: Optional[str] = None) -> ChecklistExecution:
        """Marca ou desmarca um item. Repetir a mesma chamada nao altera o resultado"""
        execution = await self.get_execution(principal, execution_id)

        result = await self.db.execute(
            select(ChecklistExecutionItem).where(
                ChecklistExecutionItem.execution_id == execution.id,
                ChecklistExecutionItem.item_id == item_id,
            )
        )
        entry = result.scalar_one_or_none()
        if entry is None:
            raise NotFound("Item não pertence a esta execução")
        if execution.is_completed:
            raise ConflictError("Execução já concluída")

        entry.is_completed = is_completed
        entry.completed_at = datetime.utcnow() if is_completed else None
        if notes is not None:
            entry.notes = notes

        await self.db.flush()
        return await self._load(execution.id)

    async def complete(self, principal: Principal, execution_id: int, notes: Optional[str] = None) -> ChecklistExecution:
        execution = await self.get_execution(principal, execution_id)
        if execution.is_completed:
            raise ConflictError("Execução já concluída")

        pending = [
            entry.item.title for entry in execution.items
            if entry.item is not None and entry.item.is_required and not entry.is_completed
        ]
        if pending:
            raise ValidationError(f"Itens obrigatórios pendentes: {', '.join(pending)}")

        execution.is_completed = True
        execution.completed_at = datetime.utcnow()
        if notes is not None:
            execution.notes = notes
        await self.db.flush()

        logger.info(f"Execucao {execution.id} concluida por usuario {principal.principal_id}")
        return await self._load(execution.id)

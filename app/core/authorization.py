"""
StockEasy - Authorization
Principal resolvido por requisicao e predicado de acesso por linha.

Regra unica para todas as tabelas:
- MASTER enxerga e altera tudo
- demais papeis apenas linhas cuja empresa == empresa do principal

Tabelas sem company_id herdam a empresa do ancestral:
- checklist_items            -> template
- checklist_execution_items  -> execucao -> template
"""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select, true, false

from app.models import (
    ChecklistExecution,
    ChecklistExecutionItem,
    ChecklistItem,
    ChecklistTemplate,
    UserRole,
)


@dataclass(frozen=True)
class Principal:
    """Identidade, papel e escopo de empresa de uma requisicao"""
    principal_id: int
    role: str
    company_id: Optional[int]
    email: str = ""
    name: str = ""

    @property
    def is_master(self) -> bool:
        return self.role == UserRole.MASTER.value


def company_of(row) -> Optional[int]:
    """Empresa dona da linha, direta ou via ancestral"""
    if isinstance(row, ChecklistItem):
        return row.template.company_id if row.template else None
    if isinstance(row, ChecklistExecutionItem):
        execution = row.execution
        if execution is None:
            return None
        if execution.template is not None:
            return execution.template.company_id
        return execution.company_id
    return row.company_id


def can_access(principal: Principal, row) -> bool:
    """Predicado de acesso: a linha e visivel/alteravel pelo principal?

    Conferido apos a carga em ScopedStore.find, sobre linhas ja filtradas
    por scope_condition.
    """
    if principal.is_master:
        return True
    if principal.company_id is None:
        return False
    return company_of(row) == principal.company_id


def scope_condition(principal: Principal, model):
    """
    Condicao SQL equivalente a can_access para todas as linhas de `model`.
    Aplicada por toda consulta dos stores.
    """
    if principal.is_master:
        return true()

    company_id = principal.company_id
    if company_id is None:
        return false()

    if model is ChecklistItem:
        return ChecklistItem.template_id.in_(
            select(ChecklistTemplate.id).where(ChecklistTemplate.company_id == company_id)
        )

    if model is ChecklistExecutionItem:
        return ChecklistExecutionItem.execution_id.in_(
            select(ChecklistExecution.id)
            .join(ChecklistTemplate, ChecklistExecution.template_id == ChecklistTemplate.id)
            .where(ChecklistTemplate.company_id == company_id)
        )

    return model.company_id == company_id

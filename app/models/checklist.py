"""
StockEasy - Checklist Models
Modelos de checklist (abertura, fechamento, limpeza) e suas execucoes
"""
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, Boolean, DateTime, Text, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.database import Base


class ChecklistType(str, Enum):
    """Tipos de checklist"""
    ABERTURA = "abertura"
    FECHAMENTO = "fechamento"
    LIMPEZA = "limpeza"


class ChecklistTemplate(Base):
    """Modelo de checklist"""
    __tablename__ = "checklist_templates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    type = Column(String(20), nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "company_id": self.company_id,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class ChecklistItem(Base):
    """Item de um modelo de checklist. Escopo herdado do template"""
    __tablename__ = "checklist_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    template_id = Column(Integer, ForeignKey("checklist_templates.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    category = Column(String(100))  # Equipamentos, Cozinha, Estoque...
    estimated_minutes = Column(Integer, default=5)
    order = Column(Integer, nullable=False, default=0)
    is_required = Column(Boolean, nullable=False, default=True)

    template = relationship("ChecklistTemplate", lazy="selectin")

    def to_dict(self):
        return {
            "id": self.id,
            "template_id": self.template_id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "estimated_minutes": self.estimated_minutes,
            "order": self.order,
            "is_required": self.is_required,
        }


class ChecklistExecution(Base):
    """Execucao de um checklist"""
    __tablename__ = "checklist_executions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    template_id = Column(Integer, ForeignKey("checklist_templates.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    started_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    completed_at = Column(DateTime)
    is_completed = Column(Boolean, nullable=False, default=False)
    notes = Column(Text)

    template = relationship("ChecklistTemplate", lazy="selectin")
    user = relationship("User", lazy="selectin")
    items = relationship(
        "ChecklistExecutionItem",
        back_populates="execution",
        lazy="selectin",
        order_by="ChecklistExecutionItem.id",
    )

    @property
    def progress(self) -> int:
        """Percentual de itens concluidos"""
        if not self.items:
            return 0
        done = sum(1 for item in self.items if item.is_completed)
        return round(done * 100 / len(self.items))

    def to_dict(self):
        return {
            "id": self.id,
            "template_id": self.template_id,
            "user_id": self.user_id,
            "company_id": self.company_id,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "is_completed": self.is_completed,
            "notes": self.notes,
            "progress": self.progress,
            "template": self.template.to_dict() if self.template else None,
            "user": {"id": self.user.id, "name": self.user.name} if self.user else None,
            "items": [item.to_dict() for item in self.items],
        }


class ChecklistExecutionItem(Base):
    """Estado de um item dentro de uma execucao"""
    __tablename__ = "checklist_execution_items"
    __table_args__ = (
        UniqueConstraint('execution_id', 'item_id', name='uq_execution_items_execution_item'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    execution_id = Column(Integer, ForeignKey("checklist_executions.id"), nullable=False, index=True)
    item_id = Column(Integer, ForeignKey("checklist_items.id"), nullable=False)
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime)
    notes = Column(Text)

    execution = relationship("ChecklistExecution", back_populates="items")
    item = relationship("ChecklistItem", lazy="selectin")

    def to_dict(self):
        return {
            "id": self.id,
            "execution_id": self.execution_id,
            "item_id": self.item_id,
            "is_completed": self.is_completed,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "notes": self.notes,
            "item": self.item.to_dict() if self.item else None,
        }

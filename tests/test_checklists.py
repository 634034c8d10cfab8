"""
Tests - Checklist execution state machine
"""
import pytest
from sqlalchemy import func, select

from app.core.errors import ConflictError, NotFound, ReferentialError, ValidationError
from app.models import ChecklistExecutionItem
from app.services import ChecklistService, ItemStore, TemplateStore


async def make_template(db, principal, items=5, required=True, name="Abertura"):
    template = await TemplateStore(db).create(principal, {"name": name, "type": "abertura"})
    created = []
    for position in range(items):
        created.append(await ItemStore(db).create(principal, {
            "template_id": template.id,
            "title": f"Tarefa {position + 1}",
            "order": items - position,
            "is_required": required,
        }))
    return template, created


class TestStart:
    async def test_materializes_one_entry_per_item(self, db, tenants):
        template, items = await make_template(db, tenants["a"])
        execution = await ChecklistService(db).start(tenants["a"], template.id)

        assert execution.is_completed is False
        assert execution.completed_at is None
        assert len(execution.items) == 5
        assert all(not entry.is_completed for entry in execution.items)
        assert {entry.item_id for entry in execution.items} == {item.id for item in items}
        # Ordem do checklist preservada
        assert [entry.item.title for entry in execution.items][0] == "Tarefa 5"
        assert execution.progress == 0

    async def test_template_out_of_scope(self, db, tenants):
        template, _ = await make_template(db, tenants["a"])
        with pytest.raises(NotFound):
            await ChecklistService(db).start(tenants["b"], template.id)

    async def test_inactive_template(self, db, tenants):
        template, _ = await make_template(db, tenants["a"])
        await TemplateStore(db).update(tenants["a"], template.id, {"is_active": False})
        with pytest.raises(ValidationError):
            await ChecklistService(db).start(tenants["a"], template.id)

    async def test_one_open_execution_per_day(self, db, tenants):
        template, _ = await make_template(db, tenants["a"], items=1)
        service = ChecklistService(db)
        first = await service.start(tenants["a"], template.id)

        with pytest.raises(ConflictError):
            await service.start(tenants["a"], template.id)

        await service.toggle_item(tenants["a"], first.id, first.items[0].item_id, True)
        await service.complete(tenants["a"], first.id)
        second = await service.start(tenants["a"], template.id)
        assert second.id != first.id


class TestToggle:
    async def test_toggle_is_idempotent(self, db, tenants):
        template, items = await make_template(db, tenants["a"])
        service = ChecklistService(db)
        execution = await service.start(tenants["a"], template.id)

        await service.toggle_item(tenants["a"], execution.id, items[0].id, True)
        first_at = next(e for e in execution.items if e.item_id == items[0].id).completed_at
        execution = await service.toggle_item(tenants["a"], execution.id, items[0].id, True, notes="ok")

        done = [entry for entry in execution.items if entry.is_completed]
        assert len(done) == 1
        assert done[0].completed_at is not None
        assert done[0].completed_at >= first_at
        assert done[0].notes == "ok"

        count = await db.execute(
            select(func.count(ChecklistExecutionItem.id)).where(ChecklistExecutionItem.execution_id == execution.id)
        )
        assert count.scalar() == 5

    async def test_untoggle_clears_timestamp(self, db, tenants):
        template, items = await make_template(db, tenants["a"])
        service = ChecklistService(db)
        execution = await service.start(tenants["a"], template.id)

        await service.toggle_item(tenants["a"], execution.id, items[1].id, True)
        execution = await service.toggle_item(tenants["a"], execution.id, items[1].id, False)
        entry = next(e for e in execution.items if e.item_id == items[1].id)
        assert entry.is_completed is False
        assert entry.completed_at is None

    async def test_item_not_in_execution(self, db, tenants):
        template, _ = await make_template(db, tenants["a"])
        _, other_items = await make_template(db, tenants["a"], items=1, name="Limpeza")
        service = ChecklistService(db)
        execution = await service.start(tenants["a"], template.id)

        with pytest.raises(NotFound):
            await service.toggle_item(tenants["a"], execution.id, other_items[0].id, True)

    async def test_execution_out_of_scope(self, db, tenants):
        template, items = await make_template(db, tenants["a"])
        execution = await ChecklistService(db).start(tenants["a"], template.id)
        with pytest.raises(NotFound):
            await ChecklistService(db).toggle_item(tenants["b"], execution.id, items[0].id, True)


class TestComplete:
    async def test_complete_after_all_items(self, db, tenants):
        template, items = await make_template(db, tenants["a"])
        service = ChecklistService(db)
        execution = await service.start(tenants["a"], template.id)

        for item in items:
            execution = await service.toggle_item(tenants["a"], execution.id, item.id, True)
        assert execution.progress == 100

        execution = await service.complete(tenants["a"], execution.id, notes="Tudo certo")
        assert execution.is_completed is True
        assert execution.completed_at is not None
        assert execution.notes == "Tudo certo"

    async def test_required_items_pending(self, db, tenants):
        template, items = await make_template(db, tenants["a"], items=2)
        service = ChecklistService(db)
        execution = await service.start(tenants["a"], template.id)
        await service.toggle_item(tenants["a"], execution.id, items[0].id, True)

        with pytest.raises(ValidationError) as exc:
            await service.complete(tenants["a"], execution.id)
        assert "Tarefa 2" in exc.value.detail

    async def test_optional_items_may_stay_open(self, db, tenants):
        template, _ = await make_template(db, tenants["a"], items=3, required=False)
        service = ChecklistService(db)
        execution = await service.start(tenants["a"], template.id)
        execution = await service.complete(tenants["a"], execution.id)
        assert execution.is_completed is True

    async def test_completed_is_terminal(self, db, tenants):
        template, items = await make_template(db, tenants["a"], items=1)
        service = ChecklistService(db)
        execution = await service.start(tenants["a"], template.id)
        await service.toggle_item(tenants["a"], execution.id, items[0].id, True)
        await service.complete(tenants["a"], execution.id)

        with pytest.raises(ConflictError):
            await service.complete(tenants["a"], execution.id)
        with pytest.raises(ConflictError):
            await service.toggle_item(tenants["a"], execution.id, items[0].id, False)


class TestListing:
    async def test_list_scoped(self, db, tenants):
        template_a, _ = await make_template(db, tenants["a"], items=1)
        template_b, _ = await make_template(db, tenants["b"], items=1)
        service = ChecklistService(db)
        await service.start(tenants["a"], template_a.id)
        await service.start(tenants["b"], template_b.id)

        executions = await service.list_executions(tenants["a"])
        assert [e.template_id for e in executions] == [template_a.id]
        assert len(await service.list_executions(tenants["master"])) == 2

        data = executions[0].to_dict()
        assert data["template"]["name"] == "Abertura"
        assert data["user"]["id"] == tenants["a"].principal_id


class TestTemplateDeletion:
    async def test_template_with_history_cannot_be_deleted(self, db, tenants):
        template, _ = await make_template(db, tenants["a"], items=1)
        await ChecklistService(db).start(tenants["a"], template.id)
        with pytest.raises(ReferentialError):
            await TemplateStore(db).delete(tenants["a"], template.id)

    async def test_template_without_history_removes_items(self, db, tenants):
        template, items = await make_template(db, tenants["a"], items=2)
        assert await TemplateStore(db).delete(tenants["a"], template.id) is True
        assert await ItemStore(db).find(tenants["a"], items[0].id) is None

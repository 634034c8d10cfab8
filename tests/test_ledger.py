"""
Tests - Stock ledger
"""
from decimal import Decimal

import pytest
from sqlalchemy import select

from app.core.errors import NotFound, ValidationError
from app.models import MovementType, StockMovement
from app.services import ProductStore, StockLedger


async def make_product(db, principal, name="Queijo", min_stock=2):
    return await ProductStore(db).create(principal, {"name": name, "unit": "kg", "min_stock": min_stock})


class TestRecordMovement:
    async def test_entrada_then_saida_clamps_at_zero(self, db, tenants):
        ledger = StockLedger(db)
        product = await make_product(db, tenants["a"])
        await ledger.record_movement(tenants["a"], product.id, "entrada", 5)

        movement = await ledger.record_movement(tenants["a"], product.id, MovementType.ENTRADA, 10)
        assert movement.resulting_stock == 15
        assert (await ProductStore(db).get(tenants["a"], product.id)).current_stock == 15

        movement = await ledger.record_movement(tenants["a"], product.id, "saida", 20)
        assert movement.resulting_stock == 0
        assert movement.quantity == 20
        assert (await ProductStore(db).get(tenants["a"], product.id)).current_stock == 0

    async def test_stock_follows_fold_and_never_negative(self, db, tenants):
        ledger = StockLedger(db)
        product = await make_product(db, tenants["a"])
        sequence = [("entrada", 3), ("saida", 1), ("saida", 7), ("entrada", 4), ("saida", 2), ("entrada", 1)]

        expected = 0
        for kind, quantity in sequence:
            expected = expected + quantity if kind == "entrada" else max(0, expected - quantity)
            movement = await ledger.record_movement(tenants["a"], product.id, kind, quantity)
            assert movement.resulting_stock == expected
            assert movement.resulting_stock >= 0

        assert (await ProductStore(db).get(tenants["a"], product.id)).current_stock == 3

    @pytest.mark.parametrize("quantity", [0, -4])
    async def test_quantity_must_be_positive(self, db, tenants, quantity):
        product = await make_product(db, tenants["a"])
        with pytest.raises(ValidationError):
            await StockLedger(db).record_movement(tenants["a"], product.id, "entrada", quantity)

    async def test_product_out_of_scope(self, db, tenants):
        product = await make_product(db, tenants["a"])
        with pytest.raises(NotFound):
            await StockLedger(db).record_movement(tenants["b"], product.id, "entrada", 1)

        result = await db.execute(select(StockMovement))
        assert list(result.scalars()) == []

    async def test_total_price(self, db, tenants):
        product = await make_product(db, tenants["a"])
        movement = await StockLedger(db).record_movement(
            tenants["a"], product.id, "entrada", 4, unit_price=Decimal("2.50"), notes="Nota 123"
        )
        assert movement.total_price == Decimal("10.00")
        assert movement.to_dict()["total_price"] == 10.0
        assert movement.user_id == tenants["a"].principal_id
        assert movement.company_id == tenants["company_a"].id

    async def test_master_movement_keeps_product_company(self, db, tenants):
        product = await make_product(db, tenants["b"])
        movement = await StockLedger(db).record_movement(tenants["master"], product.id, "entrada", 2)
        assert movement.company_id == tenants["company_b"].id


class TestAdjustStock:
    async def test_adjust_records_absolute_difference(self, db, tenants):
        ledger = StockLedger(db)
        product = await make_product(db, tenants["a"])
        await ledger.record_movement(tenants["a"], product.id, "entrada", 10)

        movement = await ledger.adjust_stock(tenants["a"], product.id, 4)
        assert movement.type == "ajuste"
        assert movement.quantity == 6
        assert movement.resulting_stock == 4

        movement = await ledger.adjust_stock(tenants["a"], product.id, 9)
        assert movement.quantity == 5
        assert (await ProductStore(db).get(tenants["a"], product.id)).current_stock == 9

    async def test_adjust_to_same_value_rejected(self, db, tenants):
        product = await make_product(db, tenants["a"])
        with pytest.raises(ValidationError):
            await StockLedger(db).adjust_stock(tenants["a"], product.id, 0)

    async def test_adjust_negative_rejected(self, db, tenants):
        product = await make_product(db, tenants["a"])
        with pytest.raises(ValidationError):
            await StockLedger(db).adjust_stock(tenants["a"], product.id, -1)

    async def test_ajuste_not_accepted_as_plain_movement(self, db, tenants):
        product = await make_product(db, tenants["a"])
        with pytest.raises(ValidationError):
            await StockLedger(db).record_movement(tenants["a"], product.id, "ajuste", 3)


class TestListing:
    async def test_newest_first_and_scoped(self, db, tenants):
        ledger = StockLedger(db)
        product_a = await make_product(db, tenants["a"])
        product_b = await make_product(db, tenants["b"], name="Leite")
        first = await ledger.record_movement(tenants["a"], product_a.id, "entrada", 1)
        second = await ledger.record_movement(tenants["a"], product_a.id, "entrada", 2)
        await ledger.record_movement(tenants["b"], product_b.id, "entrada", 3)

        movements = await ledger.list_movements(tenants["a"])
        assert [m.id for m in movements] == [second.id, first.id]
        assert movements[0].to_dict()["product"]["name"] == "Queijo"

        assert len(await ledger.list_movements(tenants["master"])) == 3
        assert len(await ledger.list_movements(tenants["a"], limit=1)) == 1

    async def test_product_history(self, db, tenants):
        ledger = StockLedger(db)
        product = await make_product(db, tenants["a"])
        await ledger.record_movement(tenants["a"], product.id, "entrada", 1)
        await ledger.adjust_stock(tenants["a"], product.id, 7)

        history = await ledger.list_for_product(tenants["a"], product.id)
        assert [m.type for m in history] == ["ajuste", "entrada"]
        with pytest.raises(NotFound):
            await ledger.list_for_product(tenants["b"], product.id)

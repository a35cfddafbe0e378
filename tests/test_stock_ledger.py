"""Tests for stock availability and reservation."""

import threading

import pytest

from models.product import Product
from services.errors import InsufficientStock, InvalidAmount, ProductNotFound
from services.repositories import SqlCatalogRepository
from services.stock_ledger import StockLedger


@pytest.fixture
def ledger(db):
    return StockLedger(SqlCatalogRepository(db, "IDR"))


class TestAvailability:
    def test_enough_stock(self, ledger, make_product):
        p = make_product(stock_quantity=5)
        availability = ledger.check_availability(p.id, 5)
        assert availability.available
        assert availability.max_qty == 5

    def test_not_enough_stock(self, ledger, make_product):
        p = make_product(stock_quantity=2)
        availability = ledger.check_availability(p.id, 3)
        assert not availability.available
        assert availability.max_qty == 2

    def test_out_of_stock_flag(self, ledger, make_product):
        p = make_product(stock_quantity=50, in_stock=False)
        availability = ledger.check_availability(p.id, 1)
        assert not availability.available
        assert availability.max_qty == 0

    def test_unmanaged_stock_is_always_available(self, ledger, make_product):
        p = make_product(stock_quantity=0, manage_stock=False)
        assert ledger.check_availability(p.id, 100).available

    def test_unknown_product(self, ledger):
        with pytest.raises(ProductNotFound):
            ledger.check_availability(999, 1)


class TestReserveRelease:
    def test_reserve_and_release(self, db, ledger, make_product):
        p = make_product(stock_quantity=5)
        ledger.reserve(p.id, 3)
        db.commit()
        db.refresh(p)
        assert p.stock_quantity == 2

        ledger.release(p.id, 3)
        db.commit()
        db.refresh(p)
        assert p.stock_quantity == 5

    def test_reserve_more_than_stock_changes_nothing(self, db, ledger, make_product):
        p = make_product(stock_quantity=2)
        with pytest.raises(InsufficientStock) as exc_info:
            ledger.reserve(p.id, 3)
        assert exc_info.value.requested == 3
        db.rollback()
        db.refresh(p)
        assert p.stock_quantity == 2

    def test_unmanaged_stock_is_not_counted(self, db, ledger, make_product):
        p = make_product(stock_quantity=0, manage_stock=False)
        ledger.reserve(p.id, 4)
        db.commit()
        db.refresh(p)
        assert p.stock_quantity == 0

    @pytest.mark.parametrize("qty", [0, -2, 1.0])
    def test_quantity_must_be_positive_int(self, ledger, make_product, qty):
        p = make_product()
        with pytest.raises(InvalidAmount):
            ledger.reserve(p.id, qty)
        with pytest.raises(InvalidAmount):
            ledger.release(p.id, qty)

    def test_reserve_with_stale_read_cannot_oversell(self, session_factory, make_product):
        p = make_product(stock_quantity=1)
        first, second = session_factory(), session_factory()
        try:
            ledger_a = StockLedger(SqlCatalogRepository(first, "IDR"))
            ledger_b = StockLedger(SqlCatalogRepository(second, "IDR"))
            # Both see one unit left
            assert ledger_a.check_availability(p.id, 1).available
            assert ledger_b.check_availability(p.id, 1).available

            ledger_a.reserve(p.id, 1)
            first.commit()
            with pytest.raises(InsufficientStock):
                ledger_b.reserve(p.id, 1)
            second.rollback()
        finally:
            first.close()
            second.close()

    def test_concurrent_reserve_of_last_unit(self, session_factory, make_product):
        p = make_product(stock_quantity=1)
        product_id = p.id
        barrier = threading.Barrier(2)
        outcomes = []
        lock = threading.Lock()

        def worker():
            session = session_factory()
            try:
                ledger = StockLedger(SqlCatalogRepository(session, "IDR"))
                barrier.wait()
                try:
                    ledger.reserve(product_id, 1)
                    session.commit()
                    result = "reserved"
                except InsufficientStock:
                    session.rollback()
                    result = "refused"
                with lock:
                    outcomes.append(result)
            finally:
                session.close()

        threads = [threading.Thread(target=worker) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outcomes) == ["refused", "reserved"]
        session = session_factory()
        try:
            assert session.get(Product, product_id).stock_quantity == 0
        finally:
            session.close()


class TestAdjust:
    def test_restock_sold_out_product(self, db, ledger, make_product):
        p = make_product(stock_quantity=0)
        assert ledger.adjust(p.id, 12) == 12
        db.commit()
        db.refresh(p)
        assert p.stock_quantity == 12

    def test_write_off(self, db, ledger, make_product):
        p = make_product(stock_quantity=5)
        assert ledger.adjust(p.id, -2) == 3
        db.commit()
        db.refresh(p)
        assert p.stock_quantity == 3

    def test_write_off_beyond_stock(self, db, ledger, make_product):
        p = make_product(stock_quantity=2)
        with pytest.raises(InsufficientStock):
            ledger.adjust(p.id, -3)
        db.rollback()
        db.refresh(p)
        assert p.stock_quantity == 2

    @pytest.mark.parametrize("delta", [0, 1.5, True])
    def test_delta_must_be_non_zero_int(self, ledger, make_product, delta):
        p = make_product()
        with pytest.raises(InvalidAmount):
            ledger.adjust(p.id, delta)

    def test_unknown_product(self, ledger):
        with pytest.raises(ProductNotFound):
            ledger.adjust(999, 3)

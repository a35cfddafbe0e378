import logging
from dataclasses import dataclass

from services.errors import InsufficientStock, InvalidAmount
from services.repositories import CatalogRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Availability:
    available: bool
    max_qty: int


class StockLedger:
    """Availability checks and stock counter changes for catalog products."""

    def __init__(self, catalog: CatalogRepository):
        self.catalog = catalog

    def check_availability(self, product_id: int, requested_qty: int) -> Availability:
        product = self.catalog.get(product_id)
        if not product.in_stock:
            return Availability(available=False, max_qty=0)
        if not product.manage_stock:
            return Availability(available=True, max_qty=max(requested_qty, product.stock_quantity))
        return Availability(
            available=product.stock_quantity >= requested_qty,
            max_qty=product.stock_quantity,
        )

    def reserve(self, product_id: int, qty: int) -> None:
        _check_qty(qty)
        product = self.catalog.get(product_id)
        if not product.manage_stock:
            return
        if not self.catalog.decrement_stock(product_id, qty):
            logger.warning("Stock reservation refused: product=%s qty=%s", product_id, qty)
            raise InsufficientStock(product_id, qty, product.name)

    def release(self, product_id: int, qty: int) -> None:
        _check_qty(qty)
        product = self.catalog.get(product_id)
        if not product.manage_stock:
            return
        self.catalog.increment_stock(product_id, qty)

    def adjust(self, product_id: int, delta: int) -> int:
        """Restock (positive delta) or write off (negative delta) by hand.

        Applies whether or not the product manages stock. A write-off larger
        than the stock on hand raises InsufficientStock. Returns the new count.
        """
        if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
            raise InvalidAmount(f"Stock adjustment must be a non-zero integer, got {delta!r}")
        product = self.catalog.get(product_id)
        if delta > 0:
            self.catalog.increment_stock(product_id, delta)
        elif not self.catalog.decrement_stock(product_id, -delta):
            raise InsufficientStock(product_id, -delta, product.name)
        new_quantity = self.catalog.get(product_id).stock_quantity
        logger.info("Stock adjusted: product=%s delta=%s now=%s", product_id, delta, new_quantity)
        return new_quantity


def _check_qty(qty: int) -> None:
    if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
        raise InvalidAmount(f"Quantity must be a positive integer, got {qty!r}")

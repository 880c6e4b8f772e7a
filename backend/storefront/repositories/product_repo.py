from typing import List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from storefront.models.product import Product

# backends where the count and the page read can share one REPEATABLE READ snapshot
SNAPSHOT_DIALECTS = ("postgresql",)


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def _begin_snapshot(self):
        """
        Pin the session's next transaction to a single snapshot when the backend
        supports it. Only possible before the session has started a transaction;
        otherwise the caller's transaction is reused as-is.
        """
        if self.db.in_transaction():
            return
        if self.db.get_bind().dialect.name in SNAPSHOT_DIALECTS:
            self.db.connection(execution_options={"isolation_level": "REPEATABLE READ"})

    def find_and_count(
        self, predicate, ordering: Sequence[Tuple[str, str]], limit: int, offset: int
    ) -> Tuple[List[Product], int]:
        """
        Return the page of products matching `predicate` in `ordering`, plus the
        number of products matching `predicate` regardless of limit/offset.

        `ordering` is a sequence of (column name, "asc"|"desc") pairs.
        """
        self._begin_snapshot()
        query = self.db.query(Product).filter(predicate)
        total = query.with_entities(func.count(Product.product_id)).scalar() or 0

        order_by = []
        for field, direction in ordering:
            column = getattr(Product, field)
            order_by.append(column.desc() if direction == "desc" else column.asc())
        items = query.order_by(*order_by).offset(offset).limit(limit).all()
        return items, int(total)

    def get_by_id(self, product_id: int, fresh: bool = False) -> Optional[Product]:
        qry = self.db.query(Product).filter(Product.product_id == product_id)
        if fresh:
            # re-read the row even if the instance is already in the identity map
            qry = qry.populate_existing()
        return qry.first()

    def get_active_by_id(self, product_id: int) -> Optional[Product]:
        return (
            self.db.query(Product)
            .filter(Product.product_id == product_id, Product.is_active.is_(True))
            .first()
        )

    def add(self, product: Product) -> Product:
        self.db.add(product)
        self.db.flush()
        return product

    def delete(self, product_id: int) -> int:
        deleted = (
            self.db.query(Product)
            .filter(Product.product_id == product_id)
            .delete(synchronize_session="fetch")
        )
        self.db.flush()
        return deleted

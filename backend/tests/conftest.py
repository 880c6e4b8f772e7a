import itertools
import os
import tempfile
from decimal import Decimal

# must be set before storefront.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(
    tempfile.gettempdir(), f"storefront-tests-{os.getpid()}.db"
)
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest

from storefront.db import SessionLocal, init_db
from storefront.models.product import Product


@pytest.fixture(autouse=True)
def fresh_db():
    # Recreate DB fresh for every test
    init_db(reset=True)
    yield


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def make_product(db):
    counter = itertools.count(1)

    def _make(**fields):
        n = next(counter)
        fields.setdefault("name", f"Product {n}")
        fields.setdefault("slug", f"product-{n}")
        fields.setdefault("price", Decimal("10.00"))
        fields.setdefault("stock", 1)
        p = Product(**fields)
        db.add(p)
        db.commit()
        return p

    return _make

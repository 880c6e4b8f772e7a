import logging
import re
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.models.product import Product
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product_schema import ProductCreate, ProductUpdate
from storefront.services.catalogue_query import CatalogueUnavailable
from storefront.utils.transactions import smart_transaction

log = logging.getLogger("storefront.products")

UNIQUE_FIELDS = ("slug", "sku")
# columns that may be omitted from an update but never cleared by one
NOT_NULL_FIELDS = ("name", "slug", "price", "stock", "is_active")


class ProductNotFound(Exception):
    pass


class DuplicateValueError(Exception):
    def __init__(self, field: str):
        super().__init__(f"Duplicate value for field '{field}'")
        self.field = field


def duplicate_field(exc: IntegrityError) -> Optional[str]:
    """
    Name the unique column an IntegrityError complains about, if it is one we
    enforce. SQLite reports "UNIQUE constraint failed: products.slug",
    PostgreSQL "Key (slug)=(...) already exists" / "products_slug_key".
    """
    message = str(exc.orig) if exc.orig is not None else str(exc)
    for field in UNIQUE_FIELDS:
        if re.search(rf"(products\.{field}\b|\({field}\)|products_{field}_key)", message):
            return field
    return None


def normalize_media(images, image_url) -> Tuple[Optional[List[str]], Optional[str]]:
    """
    Return (images, image_url) satisfying image_url == images[0], or both None.

    A missing images list is derived from image_url; blank and non-string
    entries are dropped and an empty list collapses to None.
    """
    if not isinstance(images, (list, tuple)):
        images = [image_url] if image_url else None
    else:
        images = [url for url in images if url and isinstance(url, str)] or None
    return images, (images[0] if images else None)


def normalize_original_price(value) -> Optional[Decimal]:
    if value is None:
        return None
    value = Decimal(value)
    return value if value > 0 else None


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class ProductService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ProductRepository(db)

    def _write(self, work):
        try:
            with smart_transaction(self.db):
                return work()
        except IntegrityError as e:
            field = duplicate_field(e)
            if field:
                log.info("rejected duplicate %s", field)
                raise DuplicateValueError(field) from e
            raise
        except SQLAlchemyError as e:
            log.exception("product write failed")
            raise CatalogueUnavailable("Catalogue store unavailable") from e

    def get_public(self, product_id: int) -> Product:
        product = self.repo.get_active_by_id(product_id)
        if not product:
            raise ProductNotFound(product_id)
        return product

    def get_admin(self, product_id: int) -> Product:
        product = self.repo.get_by_id(product_id)
        if not product:
            raise ProductNotFound(product_id)
        return product

    def create(self, payload: ProductCreate) -> Product:
        data = payload.model_dump()
        data["images"], data["image_url"] = normalize_media(data["images"], data["image_url"])
        data["original_price"] = normalize_original_price(data["original_price"])
        data["sku"] = _blank_to_none(data["sku"])
        data["specs"] = data["specs"] or {}
        if data["is_active"] is None:
            data["is_active"] = True

        product = self._write(lambda: self.repo.add(Product(**data)))
        log.info("created product %s (%s)", product.product_id, product.slug)
        return self.repo.get_by_id(product.product_id, fresh=True)

    def update(self, product_id: int, payload: ProductUpdate) -> Product:
        """
        Apply the fields present in `payload`, commit, then return the row as
        re-read from the database.
        """
        changes: Dict = payload.model_dump(exclude_unset=True)
        for name in NOT_NULL_FIELDS:
            if name in changes and changes[name] is None:
                del changes[name]
        if "images" in changes or "image_url" in changes:
            changes["images"], changes["image_url"] = normalize_media(
                changes.get("images"), changes.get("image_url")
            )
        if "original_price" in changes:
            changes["original_price"] = normalize_original_price(changes["original_price"])
        if "sku" in changes:
            changes["sku"] = _blank_to_none(changes["sku"])
        if "specs" in changes:
            changes["specs"] = changes["specs"] or {}

        def apply():
            product = self.repo.get_by_id(product_id)
            if not product:
                return None
            for name, value in changes.items():
                setattr(product, name, value)
            self.db.flush()
            return product

        if self._write(apply) is None:
            raise ProductNotFound(product_id)
        log.info("updated product %s fields=%s", product_id, sorted(changes))
        return self.repo.get_by_id(product_id, fresh=True)

    def delete(self, product_id: int) -> None:
        deleted = self._write(lambda: self.repo.delete(product_id))
        if not deleted:
            raise ProductNotFound(product_id)
        log.info("deleted product %s", product_id)

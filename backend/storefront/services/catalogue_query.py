"""
Product catalogue query engine.

Turns loosely-typed filter, pagination and sort input into one page of
products plus the total number of matches. Bad input never fails a query:
each offending value falls back to its default. Storage faults always do,
as CatalogueUnavailable.
"""
import enum
import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from functools import reduce
from typing import Any, FrozenSet, List, Optional, Tuple

from sqlalchemy import and_, or_, true
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.models.product import Product
from storefront.repositories.product_repo import ProductRepository

log = logging.getLogger("storefront.catalogue")

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10

SORTABLE_FIELDS = (
    "name",
    "price",
    "stock",
    "created_at",
    "updated_at",
    "slug",
    "is_active",
    "product_id",
)
TIE_BREAK_FIELD = "product_id"
# largest value a signed 64-bit INTEGER column or LIMIT/OFFSET can bind
MAX_SQL_INT = 2**63 - 1


class CatalogueUnavailable(Exception):
    """The product store could not answer (connection loss, timeout, driver fault)."""


class ActiveFlag(enum.Enum):
    UNSET = "unset"
    TRUE = "true"
    FALSE = "false"

    @classmethod
    def parse(cls, value: Any) -> "ActiveFlag":
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.UNSET
        if isinstance(value, bool):
            return cls.TRUE if value else cls.FALSE
        text = str(value).strip().lower()
        if text in ("true", "1", "yes", "on"):
            return cls.TRUE
        if text in ("false", "0", "no", "off"):
            return cls.FALSE
        return cls.UNSET


class SortDirection(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


_DIRECTIONS = {
    "asc": SortDirection.ASC,
    "ascend": SortDirection.ASC,
    "ascending": SortDirection.ASC,
    "desc": SortDirection.DESC,
    "descend": SortDirection.DESC,
    "descending": SortDirection.DESC,
}

DEFAULT_SORT = ("created_at", SortDirection.DESC)


@dataclass
class FilterSpec:
    min_price: Any = None
    max_price: Any = None
    category_ids: Any = None
    subcategory_ids: Any = None
    q: Optional[str] = None
    is_active: Any = ActiveFlag.UNSET


@dataclass
class PaginationSpec:
    page: Any = DEFAULT_PAGE
    page_size: Any = DEFAULT_PAGE_SIZE


@dataclass
class SortSpec:
    field: Optional[str] = None
    order: Optional[str] = None


@dataclass(frozen=True)
class PageWindow:
    page: int
    page_size: int

    @property
    def limit(self) -> int:
        return min(self.page_size, MAX_SQL_INT)

    @property
    def offset(self) -> int:
        # past the last row either way; the page comes back empty with the real total
        return min((self.page - 1) * self.page_size, MAX_SQL_INT)


@dataclass
class CataloguePage:
    items: List[Product] = field(default_factory=list)
    total: int = 0


def _as_price(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    # "2.7" truncates like 2.7 does
    try:
        number = float(text)
    except ValueError:
        return None
    return int(number) if math.isfinite(number) else None


def _as_id_set(value: Any) -> FrozenSet[int]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        value = value.split(",")
    elif isinstance(value, (int, bool)):
        value = [value]
    try:
        candidates = list(value)
    except TypeError:
        return frozenset()
    # ids outside the column range cannot match any row
    return frozenset(
        i for i in map(_as_int, candidates) if i is not None and -MAX_SQL_INT - 1 <= i <= MAX_SQL_INT
    )


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _active_fragment(flag: Any):
    flag = ActiveFlag.parse(flag)
    if flag is ActiveFlag.TRUE:
        return Product.is_active.is_(True)
    if flag is ActiveFlag.FALSE:
        return Product.is_active.is_(False)
    return true()


def _price_fragment(minimum: Any, maximum: Any):
    lower, upper = _as_price(minimum), _as_price(maximum)
    return and_(
        Product.price >= lower if lower is not None else true(),
        Product.price <= upper if upper is not None else true(),
    )


def _membership_fragment(column, ids: Any):
    wanted = _as_id_set(ids)
    if not wanted:
        return true()
    return column.in_(sorted(wanted))


def _text_fragment(q: Any):
    if q is None:
        return true()
    text = str(q).strip()
    if not text:
        return true()
    pattern = f"%{_escape_like(text)}%"
    return or_(
        Product.name.ilike(pattern, escape="\\"),
        Product.description.ilike(pattern, escape="\\"),
        Product.sku.ilike(pattern, escape="\\"),
    )


def build_predicate(filters: Optional[FilterSpec] = None):
    """
    Translate a FilterSpec into one SQLAlchemy boolean clause.

    An empty FilterSpec yields `true()`, i.e. every product regardless of status.
    """
    filters = filters or FilterSpec()
    fragments = [
        _active_fragment(filters.is_active),
        _price_fragment(filters.min_price, filters.max_price),
        _membership_fragment(Product.category_id, filters.category_ids),
        _membership_fragment(Product.subcategory_id, filters.subcategory_ids),
        _text_fragment(filters.q),
    ]
    return reduce(and_, fragments, true())


def resolve_sort(field_name: Any = None, order: Any = None) -> List[Tuple[str, SortDirection]]:
    """
    Return the full ordering as (field, direction) pairs, primary first.

    Unknown fields fall back to newest first. product_id ascending is always
    the last key so every page boundary is deterministic.
    """
    requested = str(field_name).strip().lower() if field_name is not None else ""
    if requested in SORTABLE_FIELDS:
        direction = _DIRECTIONS.get(str(order).strip().lower(), SortDirection.ASC)
        ordering = [(requested, direction)]
    else:
        ordering = [DEFAULT_SORT]

    if ordering[0][0] != TIE_BREAK_FIELD:
        ordering.append((TIE_BREAK_FIELD, SortDirection.ASC))
    return ordering


def paginate(page: Any = DEFAULT_PAGE, page_size: Any = DEFAULT_PAGE_SIZE) -> PageWindow:
    page, page_size = _as_int(page), _as_int(page_size)
    if page is None or page <= 0:
        page = DEFAULT_PAGE
    if page_size is None or page_size <= 0:
        page_size = DEFAULT_PAGE_SIZE
    return PageWindow(page=page, page_size=page_size)


class CatalogueQueryService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ProductRepository(db)

    def query(
        self,
        filters: Optional[FilterSpec] = None,
        pagination: Optional[PaginationSpec] = None,
        sort: Optional[SortSpec] = None,
    ) -> CataloguePage:
        pagination = pagination or PaginationSpec()
        sort = sort or SortSpec()

        predicate = build_predicate(filters)
        ordering = resolve_sort(sort.field, sort.order)
        window = paginate(pagination.page, pagination.page_size)
        log.debug(
            "catalogue query order=%s page=%s size=%s",
            [(f, d.value) for f, d in ordering],
            window.page,
            window.page_size,
        )

        try:
            items, total = self.repo.find_and_count(
                predicate,
                [(f, d.value) for f, d in ordering],
                limit=window.limit,
                offset=window.offset,
            )
        except SQLAlchemyError as e:
            log.exception("catalogue query failed")
            raise CatalogueUnavailable("Catalogue store unavailable") from e
        return CataloguePage(items=items, total=total)

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.db import get_db
from storefront.schemas.product_schema import ProductListOut, ProductOut
from storefront.services.catalogue_query import (
    ActiveFlag,
    CatalogueQueryService,
    FilterSpec,
    PaginationSpec,
    SortSpec,
)
from storefront.services.product_service import ProductNotFound, ProductService

router = APIRouter(tags=["catalogue"])


# Every parameter is taken as raw text: malformed values fall back to defaults
# inside the query engine instead of failing request validation.
@router.get("", summary="List products", response_model=ProductListOut)
def list_products(
    minPrice: Optional[str] = Query(None, description="inclusive lower price bound"),
    maxPrice: Optional[str] = Query(None, description="inclusive upper price bound"),
    categoryIds: Optional[str] = Query(None, description="comma-separated category ids"),
    subcategoryIds: Optional[str] = Query(None, description="comma-separated subcategory ids"),
    q: Optional[str] = Query(None, description="search term (name, description, sku)"),
    is_active: Optional[str] = Query(None, description="true/false; omit for all statuses"),
    sortBy: Optional[str] = Query(None),
    order: Optional[str] = Query(None, description="asc or desc"),
    page: Optional[str] = Query(None),
    pageSize: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    filters = FilterSpec(
        min_price=minPrice,
        max_price=maxPrice,
        category_ids=categoryIds,
        subcategory_ids=subcategoryIds,
        q=q,
        is_active=ActiveFlag.parse(is_active),
    )
    pagination = PaginationSpec(page=page, page_size=pageSize)
    sort = SortSpec(field=sortBy, order=order)

    result = CatalogueQueryService(db).query(filters, pagination, sort)
    return {
        "data": [ProductOut.model_validate(p) for p in result.items],
        "total": result.total,
    }


@router.get("/{product_id}", summary="Get an active product", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    try:
        return ProductService(db).get_public(product_id)
    except ProductNotFound:
        raise HTTPException(status_code=404, detail="Product not found")

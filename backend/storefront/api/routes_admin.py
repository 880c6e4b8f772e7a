from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.db import get_db
from storefront.schemas.product_schema import ProductCreate, ProductOut, ProductUpdate
from storefront.services.product_service import (
    DuplicateValueError,
    ProductNotFound,
    ProductService,
)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/products/{product_id}", summary="Get a product in any status", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    try:
        return ProductService(db).get_admin(product_id)
    except ProductNotFound:
        raise HTTPException(status_code=404, detail="Product not found")


@router.post("/products", summary="Create a product", response_model=ProductOut, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    try:
        return ProductService(db).create(payload)
    except DuplicateValueError as e:
        raise HTTPException(status_code=409, detail={"message": str(e), "field": e.field})


@router.put("/products/{product_id}", summary="Update a product", response_model=ProductOut)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    try:
        return ProductService(db).update(product_id, payload)
    except ProductNotFound:
        raise HTTPException(status_code=404, detail="Product not found")
    except DuplicateValueError as e:
        raise HTTPException(status_code=409, detail={"message": str(e), "field": e.field})


@router.delete("/products/{product_id}", summary="Delete a product")
def delete_product(product_id: int, db: Session = Depends(get_db)):
    try:
        ProductService(db).delete(product_id)
    except ProductNotFound:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"product_id": product_id, "deleted": True}

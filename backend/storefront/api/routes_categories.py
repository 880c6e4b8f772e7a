from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.db import get_db
from storefront.repositories.category_repo import CategoryRepository
from storefront.schemas.category_schema import CategoryOut

router = APIRouter(tags=["categories"])


@router.get("", summary="List categories with their subcategories", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return CategoryRepository(db).list_with_subcategories()

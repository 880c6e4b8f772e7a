from typing import List

from pydantic import BaseModel, ConfigDict


class SubcategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    subcategory_id: int
    category_id: int
    name: str
    slug: str


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    category_id: int
    name: str
    slug: str
    subcategories: List[SubcategoryOut] = []

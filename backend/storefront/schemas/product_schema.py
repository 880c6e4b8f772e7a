from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    product_id: int
    name: str
    slug: str
    description: Optional[str] = None
    price: Decimal
    original_price: Optional[Decimal] = None
    stock: int
    sku: Optional[str] = None
    image_url: Optional[str] = None
    images: Optional[List[str]] = None
    category_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    specs: Dict[str, str] = Field(default_factory=dict)
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ProductListOut(BaseModel):
    data: List[ProductOut]
    total: int


class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    stock: int = Field(ge=0)
    description: Optional[str] = None
    original_price: Optional[Decimal] = None
    sku: Optional[str] = None
    image_url: Optional[str] = None
    images: Optional[List[Optional[str]]] = None
    category_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    specs: Optional[Dict[str, str]] = None
    is_active: Optional[bool] = None


class ProductUpdate(BaseModel):
    """Partial update: only fields present in the request body are applied."""

    name: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = Field(default=None, min_length=1)
    price: Optional[Decimal] = Field(default=None, ge=0)
    stock: Optional[int] = Field(default=None, ge=0)
    description: Optional[str] = None
    original_price: Optional[Decimal] = None
    sku: Optional[str] = None
    image_url: Optional[str] = None
    images: Optional[List[Optional[str]]] = None
    category_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    specs: Optional[Dict[str, str]] = None
    is_active: Optional[bool] = None

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text

from storefront.db import Base


def _now():
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "products"

    product_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(256), nullable=False, index=True)
    slug = Column(String(256), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    original_price = Column(Numeric(10, 2), nullable=True)  # "was" price, null unless > 0
    stock = Column(Integer, nullable=False, default=0)
    sku = Column(String(64), unique=True, nullable=True)
    image_url = Column(String(512), nullable=True)  # always images[0] or null
    images = Column(JSON(none_as_null=True), nullable=True)
    category_id = Column(Integer, ForeignKey("categories.category_id"), nullable=True, index=True)
    subcategory_id = Column(
        Integer, ForeignKey("subcategories.subcategory_id"), nullable=True, index=True
    )
    specs = Column(JSON, nullable=False, default=dict)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    def __repr__(self):
        return f"<Product product_id={self.product_id} slug={self.slug}>"

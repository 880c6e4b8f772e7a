from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from storefront.db import Base


class Category(Base):
    __tablename__ = "categories"

    category_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(128), unique=True, nullable=False)
    slug = Column(String(128), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    subcategories = relationship(
        "Subcategory",
        back_populates="category",
        cascade="all, delete-orphan",
        order_by="Subcategory.subcategory_id",
    )

    def __repr__(self):
        return f"<Category slug={self.slug}>"


class Subcategory(Base):
    __tablename__ = "subcategories"
    # subcategory slugs only need to be unique under their parent
    __table_args__ = (UniqueConstraint("category_id", "slug", name="uq_subcategory_category_slug"),)

    subcategory_id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.category_id"), nullable=False, index=True)
    name = Column(String(128), nullable=False)
    slug = Column(String(128), nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    category = relationship("Category", back_populates="subcategories")

    def __repr__(self):
        return f"<Subcategory slug={self.slug} category_id={self.category_id}>"

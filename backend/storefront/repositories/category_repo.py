from typing import List

from sqlalchemy.orm import Session, selectinload

from storefront.models.category import Category


class CategoryRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_with_subcategories(self) -> List[Category]:
        return (
            self.db.query(Category)
            .options(selectinload(Category.subcategories))
            .order_by(Category.name, Category.category_id)
            .all()
        )

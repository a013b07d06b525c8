"""Product repository (read-only)."""

from uuid import UUID

from sqlalchemy.orm import Session

from kambafy.models.product import Product


class ProductRepository:
    """Repository for Product model."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, product_id: UUID) -> Product | None:
        """Get a product by ID."""
        return self.db.query(Product).filter(Product.id == product_id).first()

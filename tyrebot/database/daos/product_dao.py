"""
Product DAO

Data-access layer for the `Product` catalogue entity.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from tyrebot.database.entities.products import Product

logger = logging.getLogger(__name__)


class ProductDao:
    """
    Data Access Object (DAO) for managing Product entities.
    """

    def fetchActiveProducts(self, session: Session) -> list[Product]:
        """Active products ordered by category, then product name."""
        try:
            statement = (
                select(Product)
                .where(Product.is_active.is_(True))
                .order_by(Product.category, Product.product_name)
            )
            return list(session.scalars(statement).all())
        except Exception:
            logger.error("Error in ProductDao.fetchActiveProducts")
            raise

    def createProduct(self, session: Session, product: Product) -> Product:
        try:
            session.add(product)
            session.flush()
            return product
        except Exception:
            logger.error("Error in ProductDao.createProduct")
            raise

"""
Product ORM Model
=================

Catalogue entries (tyre ranges) managed by administrators.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, JSON, TEXT, VARCHAR
from sqlalchemy.orm import Mapped, mapped_column

from tyrebot.database.config.connection_engine import declarativeBase


class Product(declarativeBase):
    """ORM model for the `products` table."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_name: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    category: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    subcategory: Mapped[str] = mapped_column(VARCHAR(255), nullable=True)
    description: Mapped[str] = mapped_column(TEXT, nullable=True)
    specifications: Mapped[dict] = mapped_column(JSON, nullable=True)
    price_range: Mapped[str] = mapped_column(VARCHAR(255), nullable=True)
    features: Mapped[list] = mapped_column(JSON, nullable=True)
    image_url: Mapped[str] = mapped_column(TEXT, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Numeric,
    DateTime,
    ForeignKey,
    Boolean,
    JSON,
)
from sqlalchemy.orm import relationship
from datetime import datetime
from backoffice.core.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    sku = Column(String, unique=True, nullable=False, index=True)

    # Pricing and stock
    price = Column(Numeric(10, 2), nullable=False)
    cost_price = Column(Numeric(10, 2), default=0)
    stock_quantity = Column(Integer, default=0)
    low_stock_threshold = Column(Integer, default=10)

    category_id = Column(
        Integer, ForeignKey("categories.id"), nullable=True, index=True
    )

    # Media and shipping
    image_url = Column(String, nullable=True)
    images = Column(JSON, nullable=True)  # List of image URLs
    weight = Column(Numeric(8, 2), nullable=True)
    dimensions = Column(JSON, nullable=True)  # {"length": .., "width": .., "height": ..}

    is_active = Column(Boolean, default=True, index=True)
    is_featured = Column(Boolean, default=False)

    # SEO
    meta_title = Column(String, nullable=True)
    meta_description = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    category = relationship("Category", back_populates="products")

"""Product model."""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pos_app.database import Base


class Product(Base):
    """Product model.

    ``product_id`` is the external identifier used by the till and stored on
    bill items; ``id`` is only the surrogate key.
    """

    __tablename__ = 'products'

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(String(50), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    category_id = Column(Integer, ForeignKey('categories.id'), nullable=True)
    # May go negative when oversold
    stock = Column(Integer, nullable=False, default=0, server_default='0')
    image_path = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    category = relationship('Category', back_populates='products')

    def to_dict(self):
        return {
            'id': self.id,
            'product_id': self.product_id,
            'name': self.name,
            'price': self.price,
            'category_id': self.category_id,
            'category': self.category.name if self.category else None,
            'stock': self.stock,
            'image_path': self.image_path,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }

    def __repr__(self):
        return f"<Product(id={self.id}, product_id='{self.product_id}', stock={self.stock})>"

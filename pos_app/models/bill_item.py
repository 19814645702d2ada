"""Bill Item model."""
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from pos_app.database import Base


class BillItem(Base):
    """Bill line item.

    ``product_id`` holds the product's external identifier, not a foreign
    key, and ``product_name``/``price`` are captured at sale time so later
    catalog edits never rewrite history.
    """

    __tablename__ = 'bill_items'

    id = Column(Integer, primary_key=True, autoincrement=True)
    bill_id = Column(Integer, ForeignKey('bills.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = Column(String(50), nullable=False)
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)

    # Relationships
    bill = relationship('Bill', back_populates='items')

    def to_dict(self):
        return {
            'id': self.id,
            'product_id': self.product_id,
            'product_name': self.product_name,
            'quantity': self.quantity,
            'price': self.price,
            'total': self.total,
        }

    def __repr__(self):
        return f"<BillItem(id={self.id}, product_id='{self.product_id}', quantity={self.quantity})>"

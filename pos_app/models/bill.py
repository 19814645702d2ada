"""Bill model."""
from sqlalchemy import Column, Integer, String, Numeric, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pos_app.database import Base

DEFAULT_CUSTOMER_NAME = 'Walk-in Customer'


class Bill(Base):
    """Bill (invoice). Immutable once created; only ever deleted."""

    __tablename__ = 'bills'

    id = Column(Integer, primary_key=True, autoincrement=True)
    bill_no = Column(String(50), nullable=False, unique=True)
    customer_name = Column(String(255), nullable=True, default=DEFAULT_CUSTOMER_NAME,
                           server_default=DEFAULT_CUSTOMER_NAME)
    customer_phone = Column(String(20), nullable=True)
    subtotal = Column(Numeric(10, 2), nullable=False)
    discount = Column(Numeric(10, 2), nullable=False, default=0, server_default='0')
    gst_amount = Column(Numeric(10, 2), nullable=False, default=0, server_default='0')
    total = Column(Numeric(10, 2), nullable=False)
    payment_mode = Column(String(50), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    items = relationship(
        'BillItem',
        back_populates='bill',
        cascade='all, delete-orphan',
        passive_deletes=True,
        order_by='BillItem.id'
    )

    def to_dict(self):
        return {
            'id': self.id,
            'bill_no': self.bill_no,
            'customer_name': self.customer_name,
            'customer_phone': self.customer_phone,
            'subtotal': self.subtotal,
            'discount': self.discount,
            'gst_amount': self.gst_amount,
            'total': self.total,
            'payment_mode': self.payment_mode,
            'created_at': self.created_at,
        }

    def __repr__(self):
        return f"<Bill(id={self.id}, bill_no='{self.bill_no}', total={self.total})>"

"""
Unit tests for SQLAlchemy models.
"""

import pytest
from datetime import datetime
from decimal import Decimal
from sqlalchemy.exc import IntegrityError

from pos_app.models import AdminUser, Bill, BillItem, Product, DEFAULT_CUSTOMER_NAME


def _bill(bill_no, **kwargs):
    values = dict(
        bill_no=bill_no,
        subtotal=Decimal('100.00'),
        total=Decimal('100.00'),
        payment_mode='Cash',
        created_at=datetime.now()
    )
    values.update(kwargs)
    return Bill(**values)


class TestBillModel:
    """Tests for Bill and BillItem models."""

    def test_create_bill_defaults(self, session):
        """Customer name, discount and GST fall back to their defaults."""
        bill = _bill('SV1')
        session.add(bill)
        session.commit()

        assert bill.id is not None
        assert bill.customer_name == DEFAULT_CUSTOMER_NAME
        assert bill.discount == Decimal('0')
        assert bill.gst_amount == Decimal('0')

    def test_bill_no_unique(self, session):
        """Two bills can never share a bill number."""
        session.add(_bill('SV1'))
        session.commit()

        session.add(_bill('SV1'))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_items_deleted_with_bill(self, session):
        """Deleting a bill removes its items."""
        bill = _bill('SV1')
        bill.items.append(BillItem(
            product_id='P1', product_name='Rocket Bomb', quantity=2,
            price=Decimal('50.00'), total=Decimal('100.00')
        ))
        session.add(bill)
        session.commit()
        assert session.query(BillItem).count() == 1

        session.delete(bill)
        session.commit()

        assert session.query(Bill).count() == 0
        assert session.query(BillItem).count() == 0

    def test_items_keep_insertion_order(self, session):
        """Items come back in the order they were added."""
        bill = _bill('SV1')
        for product_id in ('P3', 'P1', 'P2'):
            bill.items.append(BillItem(
                product_id=product_id, product_name=product_id, quantity=1,
                price=Decimal('1.00'), total=Decimal('1.00')
            ))
        session.add(bill)
        session.commit()
        bill_id = bill.id
        session.expire_all()

        reloaded = session.get(Bill, bill_id)
        assert [item.product_id for item in reloaded.items] == ['P3', 'P1', 'P2']


class TestProductModel:
    """Tests for Product model."""

    def test_to_dict_includes_category_name(self, session, category_id):
        product = Product(
            product_id='P100', name='Sparkler 10cm', price=Decimal('12.50'),
            category_id=category_id, stock=3
        )
        session.add(product)
        session.commit()

        data = product.to_dict()
        assert data['product_id'] == 'P100'
        assert data['category'] == 'Rockets'
        assert data['price'] == Decimal('12.50')

    def test_product_id_unique(self, session, products):
        session.add(Product(product_id='P1', name='Copy', price=Decimal('1.00'), stock=0))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()


class TestAdminUserModel:
    """Tests for AdminUser model."""

    def test_password_hashing(self):
        """Test password hashing and verification."""
        user = AdminUser(email='owner@test.com')
        user.set_password('mypassword')

        assert user.password_hash != 'mypassword'
        assert user.check_password('mypassword') is True
        assert user.check_password('wrongpassword') is False

    def test_seeded_admin_exists(self, session):
        admin = session.query(AdminUser).filter_by(email='admin@srivelavancrackers.com').first()
        assert admin is not None
        assert admin.check_password('admin123')

"""Models package - exports all SQLAlchemy models."""
from pos_app.models.admin_user import AdminUser
from pos_app.models.setting import Setting

# Catalog
from pos_app.models.category import Category
from pos_app.models.product import Product

# Billing
from pos_app.models.bill import Bill, DEFAULT_CUSTOMER_NAME
from pos_app.models.bill_item import BillItem

__all__ = [
    'AdminUser', 'Setting',
    'Category', 'Product',
    'Bill', 'BillItem', 'DEFAULT_CUSTOMER_NAME',
]

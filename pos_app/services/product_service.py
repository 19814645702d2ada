"""Catalog service: product CRUD, category lookup and stock filters."""
import logging
import time
from decimal import Decimal, InvalidOperation
from typing import List, Dict, Optional, Any

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from pos_app.database import begin_read_only
from pos_app.models import Product, Category
from pos_app.exceptions import BusinessLogicError, NotFoundError, ConstraintViolation

logger = logging.getLogger(__name__)


def list_products(session, search: str = '', category: str = '', low_stock: bool = False,
                  low_stock_threshold: int = 10) -> List[Dict[str, Any]]:
    """
    List products ordered by name.

    Args:
        search: matches the external product id or the name (substring)
        category: exact category name
        low_stock: only products with stock below ``low_stock_threshold``
    """
    begin_read_only(session)
    query = session.query(Product).options(joinedload(Product.category)).outerjoin(
        Category, Product.category_id == Category.id
    )

    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(Product.product_id.like(pattern), Product.name.like(pattern)))

    if category:
        query = query.filter(Category.name == category)

    if low_stock:
        query = query.filter(Product.stock < low_stock_threshold)

    return [p.to_dict() for p in query.order_by(Product.name).all()]


def list_categories(session) -> List[Dict[str, Any]]:
    begin_read_only(session)
    return [c.to_dict() for c in session.query(Category).order_by(Category.name).all()]


def get_product(session, product_id: str) -> Product:
    product = session.query(Product).filter(Product.product_id == product_id).first()
    if not product:
        raise NotFoundError('Product not found')
    return product


def create_product(session, data: Dict[str, Any], image_path: Optional[str] = None) -> Product:
    """
    Create a product.

    ``product_id`` is generated as ``P<epoch millis>`` when not supplied.

    Raises:
        BusinessLogicError: Missing name/price/category or unknown category
        ConstraintViolation: Duplicate product id
    """
    product_id = (data.get('product_id') or '').strip() or f"P{int(time.time() * 1000)}"
    name = (data.get('name') or '').strip()
    category_name = (data.get('category') or '').strip()
    price = _parse_price(data.get('price'))

    if not name or price is None or not category_name:
        raise BusinessLogicError('Name, price, and category are required')

    category = _get_category(session, category_name)
    if not category:
        raise BusinessLogicError(f"Category '{category_name}' not found")

    product = Product(
        product_id=product_id,
        name=name,
        price=price,
        category_id=category.id,
        stock=_parse_stock(data.get('stock')),
        image_path=image_path
    )
    session.add(product)

    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"[CATALOG] Duplicate product id {product_id}: {e.orig}")
        raise ConstraintViolation(f"Product '{product_id}' already exists", cause=e.orig)

    logger.info(f"[CATALOG] Product {product_id} created")
    return product


def update_product(session, product_id: str, data: Dict[str, Any],
                   image_path: Optional[str] = None) -> Optional[str]:
    """
    Update name, price, category and stock; replace the image when a new one is given.

    Returns:
        The previous image path when it was replaced (caller deletes the file), else None
    """
    category_name = (data.get('category') or '').strip()
    category = _get_category(session, category_name)
    if not category:
        raise BusinessLogicError('Invalid category')

    product = get_product(session, product_id)

    name = (data.get('name') or '').strip()
    if name:
        product.name = name
    price = _parse_price(data.get('price'))
    if price is not None:
        product.price = price
    product.category_id = category.id
    if data.get('stock') not in (None, ''):
        product.stock = _parse_stock(data.get('stock'))

    old_image = None
    if image_path:
        old_image = product.image_path
        product.image_path = image_path

    session.commit()
    logger.info(f"[CATALOG] Product {product_id} updated")
    return old_image


def delete_product(session, product_id: str) -> Optional[str]:
    """
    Delete a product. Historical bill items keep their captured name and price.

    Returns:
        The image path of the deleted product (caller deletes the file)
    """
    product = get_product(session, product_id)
    image_path = product.image_path
    session.delete(product)
    session.commit()
    logger.info(f"[CATALOG] Product {product_id} deleted")
    return image_path


# =====================================================
# PRIVATE HELPERS
# =====================================================

def _get_category(session, name: str) -> Optional[Category]:
    if not name:
        return None
    return session.query(Category).filter(Category.name == name).first()


def _parse_price(value) -> Optional[Decimal]:
    if value is None or value == '':
        return None
    try:
        price = Decimal(str(value)).quantize(Decimal('0.01'))
    except (InvalidOperation, ValueError):
        raise BusinessLogicError('Price must be a number')
    if price < 0:
        raise BusinessLogicError('Price cannot be negative')
    return price


def _parse_stock(value) -> int:
    if value is None or value == '':
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BusinessLogicError('Stock must be a whole number')

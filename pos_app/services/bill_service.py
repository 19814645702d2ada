"""
Bill service with transactional logic.
Handles bill creation with stock deduction and bill deletion with stock restoration.
"""
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional, Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from pos_app.database import translate_db_error
from pos_app.models import Bill, BillItem, Product, DEFAULT_CUSTOMER_NAME
from pos_app.exceptions import (
    PosError, BusinessLogicError, NotFoundError, BillNotFound, BillCreationFailed,
    InsufficientStockError
)
from pos_app.blueprints.metrics import bills_created_total, bills_deleted_total, bill_number_retries_total
from pos_app.services.bill_number_service import DEFAULT_PREFIX, lock_allocation, next_bill_number

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')


def create_bill(
    payload: Dict[str, Any],
    session,
    prefix: str = DEFAULT_PREFIX,
    default_customer_name: str = DEFAULT_CUSTOMER_NAME,
    allow_negative_stock: bool = True,
    max_retries: int = 1
) -> Dict[str, Any]:
    """
    Create a bill, its items and the matching stock decrements atomically.

    Steps (one transaction):
    1. Lock allocation and compute the next bill number
    2. Insert the bill
    3. For each item, in order: insert it and decrement the product's stock
    4. Commit

    Totals are taken as sent by the till; they are not recomputed here.
    A unique violation on the bill number (concurrent checkout) retries the
    whole transaction up to ``max_retries`` times.

    Args:
        payload: Dictionary with:
            - customer_name: str | None
            - customer_phone: str | None
            - items: list of {id, name, quantity, price}
            - subtotal, discount, gst_amount, total: numeric
            - payment_mode: str
        session: SQLAlchemy session

    Returns:
        dict with the persisted bill fields and its items

    Raises:
        BusinessLogicError: Malformed payload (nothing is written)
        BillCreationFailed: Any failure inside the transaction (rolled back)
    """
    data = _parse_bill_payload(payload, default_customer_name)

    attempt = 0
    while True:
        try:
            bill = _insert_bill(session, data, prefix, allow_negative_stock)
            result = _serialize_created_bill(bill)
            session.commit()
            break

        except IntegrityError as e:
            session.rollback()
            if _is_bill_number_conflict(e) and attempt < max_retries:
                attempt += 1
                bill_number_retries_total.inc()
                logger.warning(f"[BILLS] Bill number race detected, retrying allocation ({attempt}/{max_retries})")
                continue
            logger.error(f"[BILLS] Constraint violation while creating bill: {e.orig}")
            raise BillCreationFailed(translate_db_error(e)) from e

        except PosError as e:
            session.rollback()
            logger.warning(f"[BILLS] Bill creation aborted: {e.message}")
            raise BillCreationFailed(e) from e

        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"[BILLS] Database error while creating bill: {e}", exc_info=True)
            raise BillCreationFailed(translate_db_error(e)) from e

    logger.info(f"[BILLS] Bill {result['bill_no']} created ({len(result['items'])} items, total {result['total']})")
    bills_created_total.inc()
    return result


def delete_bill(bill_no: str, session) -> Dict[str, Any]:
    """
    Delete a bill and put its quantities back into stock.

    Steps (one transaction):
    1. Find the bill by number (BillNotFound if absent)
    2. Read its items
    3. Increment each referenced product's stock (skip products that no longer exist)
    4. Delete the items, then the bill
    5. Commit

    Returns:
        dict with success message and the restored/skipped product ids

    Raises:
        BillNotFound: No bill with that number (nothing changes)
        StorageUnavailable / ConstraintViolation: Database failures (rolled back)
    """
    try:
        bill = session.query(Bill).filter(Bill.bill_no == bill_no).with_for_update().first()
        if not bill:
            raise BillNotFound(bill_no)

        bill_id = bill.id
        items = session.query(BillItem).filter(
            BillItem.bill_id == bill_id
        ).order_by(BillItem.id).all()

        restored = []
        skipped = []
        for item in items:
            if _adjust_stock(session, item.product_id, item.quantity):
                restored.append({'product_id': item.product_id, 'quantity': item.quantity})
            else:
                skipped.append(item.product_id)

        session.query(BillItem).filter(BillItem.bill_id == bill_id).delete(synchronize_session=False)
        session.query(Bill).filter(Bill.id == bill_id).delete(synchronize_session=False)
        session.commit()

    except BillNotFound:
        session.rollback()
        logger.info(f"[BILLS] Delete requested for unknown bill {bill_no}")
        raise

    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"[BILLS] Database error while deleting bill {bill_no}: {e}", exc_info=True)
        error = translate_db_error(e, 'Error deleting bill')
        if error is e:
            raise
        raise error from e

    if skipped:
        logger.info(f"[BILLS] Bill {bill_no}: products no longer in catalog, stock not restored: {skipped}")
    logger.info(f"[BILLS] Bill {bill_no} deleted, stock restored for {len(restored)} items")
    bills_deleted_total.inc()

    return {
        'message': 'Bill deleted successfully and stock restored',
        'bill_no': bill_no,
        'restored': restored,
        'skipped': skipped
    }


# =====================================================
# PRIVATE HELPERS
# =====================================================

def _insert_bill(session, data: Dict[str, Any], prefix: str, allow_negative_stock: bool) -> Bill:
    """Run steps 1-3 of create_bill inside the caller's transaction."""
    lock_allocation(session, prefix)
    bill_no = next_bill_number(session, prefix)

    bill = Bill(
        bill_no=bill_no,
        customer_name=data['customer_name'],
        customer_phone=data['customer_phone'],
        subtotal=data['subtotal'],
        discount=data['discount'],
        gst_amount=data['gst_amount'],
        total=data['total'],
        payment_mode=data['payment_mode'],
        created_at=datetime.now()
    )
    session.add(bill)
    session.flush()

    for line in data['items']:
        bill.items.append(BillItem(
            product_id=line['product_id'],
            product_name=line['product_name'],
            quantity=line['quantity'],
            price=line['price'],
            total=line['total']
        ))

        if not allow_negative_stock:
            _check_stock_floor(session, line['product_id'], line['quantity'])

        if not _adjust_stock(session, line['product_id'], -line['quantity']):
            raise NotFoundError(f"Product {line['product_id']} not found")

    session.flush()
    return bill


def _adjust_stock(session, product_id: str, delta: int) -> bool:
    """Add ``delta`` to a product's stock in SQL. Returns False if the product does not exist."""
    updated = session.query(Product).filter(
        Product.product_id == product_id
    ).update({Product.stock: Product.stock + delta}, synchronize_session=False)
    return updated > 0


def _check_stock_floor(session, product_id: str, quantity: int) -> None:
    """Lock the product row and refuse to take stock below zero."""
    current = session.query(Product.stock).filter(
        Product.product_id == product_id
    ).with_for_update().scalar()

    if current is not None and current < quantity:
        raise InsufficientStockError(product_id, quantity, current)


def _is_bill_number_conflict(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return 'bill_no' in message or 'bills_bill_no_key' in message


def _parse_bill_payload(payload: Optional[Dict[str, Any]], default_customer_name: str) -> Dict[str, Any]:
    """Validate and normalize the checkout payload."""
    if not payload or not isinstance(payload, dict):
        raise BusinessLogicError('Bill data is required')

    items = payload.get('items')
    if not items or not isinstance(items, list):
        raise BusinessLogicError('Bill must contain at least one item')

    payment_mode = _to_text(payload.get('payment_mode'), 'payment_mode')
    if not payment_mode:
        raise BusinessLogicError('Payment mode is required')

    customer_name = _to_text(payload.get('customer_name'), 'customer_name') or default_customer_name
    customer_phone = _to_text(payload.get('customer_phone'), 'customer_phone') or None

    parsed_items = []
    for index, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            raise BusinessLogicError(f'Item {index} is malformed')

        product_id = _to_text(item.get('id'), f'Item {index} id')
        if not product_id:
            raise BusinessLogicError(f'Item {index} has no product id')

        quantity = _to_quantity(item.get('quantity'), index)
        if quantity <= 0:
            raise BusinessLogicError('Quantity must be greater than 0')

        price = _to_money(item.get('price'), f'Item {index} price')
        parsed_items.append({
            'product_id': product_id,
            'product_name': _to_text(item.get('name'), f'Item {index} name') or product_id,
            'quantity': quantity,
            'price': price,
            'total': (price * quantity).quantize(CENTS)
        })

    return {
        'customer_name': customer_name,
        'customer_phone': customer_phone,
        'items': parsed_items,
        'subtotal': _to_money(payload.get('subtotal'), 'subtotal'),
        'discount': _to_money(payload.get('discount'), 'discount', default=Decimal('0')),
        'gst_amount': _to_money(payload.get('gst_amount'), 'gst_amount', default=Decimal('0')),
        'total': _to_money(payload.get('total'), 'total'),
        'payment_mode': payment_mode
    }


def _to_text(value, field: str) -> str:
    """Strip a text field. JSON numbers (phone numbers, numeric names) become strings."""
    if value is None:
        return ''
    if isinstance(value, (dict, list, bool)):
        raise BusinessLogicError(f'{field} must be text')
    return str(value).strip()


def _to_quantity(value, index: int) -> int:
    """Whole number of units. Fractions and booleans are rejected, never truncated."""
    if isinstance(value, bool):
        raise BusinessLogicError(f'Item {index} has an invalid quantity')
    if isinstance(value, float):
        if not value.is_integer():
            raise BusinessLogicError(f'Item {index} has an invalid quantity')
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BusinessLogicError(f'Item {index} has an invalid quantity')


def _to_money(value, field: str, default: Optional[Decimal] = None) -> Decimal:
    if value is None or value == '':
        if default is None:
            raise BusinessLogicError(f'{field} is required')
        return default.quantize(CENTS)
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise BusinessLogicError(f'{field} must be a number')
    if not amount.is_finite():
        raise BusinessLogicError(f'{field} must be a number')
    return amount.quantize(CENTS)


def _serialize_created_bill(bill: Bill) -> Dict[str, Any]:
    data = bill.to_dict()
    data['items'] = [
        {
            'id': item.product_id,
            'name': item.product_name,
            'quantity': item.quantity,
            'price': item.price,
            'total': item.total
        }
        for item in bill.items
    ]
    return data

"""Read-only bill queries used by the bill list, bill detail and PDF export."""
from datetime import date, datetime, time, timedelta
from typing import List, Dict, Optional, Any, Tuple, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from pos_app.database import begin_read_only, translate_db_error
from pos_app.exceptions import BillNotFound, BusinessLogicError
from pos_app.models import Bill, BillItem


def parse_date(value: Union[str, date, None], field: str = 'date') -> Optional[date]:
    """Parse a ``YYYY-MM-DD`` query value; empty values mean no bound."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value.strip()[:10], '%Y-%m-%d').date()
    except ValueError:
        raise BusinessLogicError(f'Invalid {field}: expected YYYY-MM-DD')


def get_date_range(start_date: Optional[date], end_date: Optional[date]) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Turn inclusive calendar dates into a half-open datetime range.

    - start only: that single day
    - start and end: every day from start to end, both included
    - end only: everything up to and including end
    """
    if start_date and end_date and start_date > end_date:
        raise BusinessLogicError('startDate must not be after endDate')

    if start_date and not end_date:
        end_date = start_date

    start_dt = datetime.combine(start_date, time.min) if start_date else None
    end_dt = datetime.combine(end_date, time.min) + timedelta(days=1) if end_date else None
    return start_dt, end_dt


def list_bills(session, start_date: Optional[date] = None, end_date: Optional[date] = None) -> List[Dict[str, Any]]:
    """
    List bills newest first, each with its items.

    Args:
        session: SQLAlchemy session
        start_date: First day to include (inclusive)
        end_date: Last day to include (inclusive)

    Returns:
        list of bill dicts with ``items: [{name, quantity, price}]``
    """
    start_dt, end_dt = get_date_range(start_date, end_date)

    query = session.query(Bill).options(selectinload(Bill.items))
    if start_dt is not None:
        query = query.filter(Bill.created_at >= start_dt)
    if end_dt is not None:
        query = query.filter(Bill.created_at < end_dt)

    try:
        begin_read_only(session)
        bills = query.order_by(Bill.created_at.desc(), Bill.id.desc()).all()
    except SQLAlchemyError as e:
        error = translate_db_error(e, 'Error fetching bills')
        if error is e:
            raise
        raise error from e

    results = []
    for bill in bills:
        data = bill.to_dict()
        data['items'] = [
            {'name': item.product_name, 'quantity': item.quantity, 'price': item.price}
            for item in bill.items
        ]
        results.append(data)
    return results


def get_bill(session, bill_no: str) -> Dict[str, Any]:
    """
    Fetch one bill by number with its items.

    Returns:
        {'bill': {...}, 'items': [{product_id, product_name, quantity, price, total}]}

    Raises:
        BillNotFound: No bill with that number
    """
    try:
        begin_read_only(session)
        bill = session.query(Bill).filter(Bill.bill_no == bill_no).first()
        if not bill:
            raise BillNotFound(bill_no)

        items = session.query(BillItem).filter(
            BillItem.bill_id == bill.id
        ).order_by(BillItem.id).all()
    except SQLAlchemyError as e:
        error = translate_db_error(e, 'Error fetching bill details')
        if error is e:
            raise
        raise error from e

    return {
        'bill': bill.to_dict(),
        'items': [
            {
                'product_id': item.product_id,
                'product_name': item.product_name,
                'quantity': item.quantity,
                'price': item.price,
                'total': item.total
            }
            for item in items
        ]
    }

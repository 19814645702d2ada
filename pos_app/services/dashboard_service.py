"""
Dashboard service.
Provides the daily metrics shown on the till's home screen.
"""

from datetime import datetime, date, time, timedelta
from decimal import Decimal
from sqlalchemy import func, distinct
from pos_app.database import begin_read_only
from pos_app.models import Bill


def get_dashboard_data(session, start_dt: datetime, end_dt: datetime, recent_limit: int = 5) -> dict:
    """
    Get dashboard data for a date range.

    Args:
        session: SQLAlchemy session
        start_dt: Start datetime (inclusive)
        end_dt: End datetime (exclusive)
        recent_limit: How many recent bills to include

    Returns:
        dict with keys:
            - todayRevenue: Decimal
            - todayOrders: int
            - todayCustomers: int (distinct customer names)
            - recentOrders: list of dicts
    """
    begin_read_only(session)

    totals = session.query(
        func.coalesce(func.sum(Bill.total), 0).label('revenue'),
        func.count(Bill.id).label('orders'),
        func.count(distinct(Bill.customer_name)).label('customers')
    ).filter(
        Bill.created_at >= start_dt,
        Bill.created_at < end_dt
    ).first()

    # Safe conversion to Decimal (handle None)
    revenue = Decimal(str(totals.revenue)) if totals and totals.revenue else Decimal('0')

    # Recent bills regardless of date
    recent = session.query(
        Bill.bill_no, Bill.customer_name, Bill.total, Bill.payment_mode, Bill.created_at
    ).order_by(
        Bill.created_at.desc(), Bill.id.desc()
    ).limit(recent_limit).all()

    return {
        'todayRevenue': revenue.quantize(Decimal('0.01')),
        'todayOrders': int(totals.orders or 0) if totals else 0,
        'todayCustomers': int(totals.customers or 0) if totals else 0,
        'recentOrders': [
            {
                'bill_no': row.bill_no,
                'customer_name': row.customer_name,
                'total': row.total,
                'payment_mode': row.payment_mode,
                'created_at': row.created_at
            }
            for row in recent
        ]
    }


def get_today_datetime_range():
    """
    Get datetime range for today (local server time).

    Returns:
        tuple: (start_dt, end_dt) where start is 00:00:00 today and end is 00:00:00 tomorrow
    """
    today = date.today()
    start_dt = datetime.combine(today, time.min)
    end_dt = start_dt + timedelta(days=1)

    return start_dt, end_dt

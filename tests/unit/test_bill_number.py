"""
Unit tests for bill number allocation.
"""

import pytest
from datetime import datetime
from decimal import Decimal
from sqlalchemy.exc import OperationalError

from pos_app.exceptions import StorageUnavailable
from pos_app.models import Bill
from pos_app.services import bill_number_service
from pos_app.services.bill_number_service import (
    parse_bill_number, format_bill_number, last_bill_number, next_bill_number
)


def _store_bills(session, *numbers):
    for bill_no in numbers:
        session.add(Bill(
            bill_no=bill_no,
            subtotal=Decimal('1.00'),
            total=Decimal('1.00'),
            payment_mode='Cash',
            created_at=datetime.now()
        ))
    session.commit()


class TestParseBillNumber:
    """Suffix parsing rules."""

    @pytest.mark.parametrize('bill_no, expected', [
        ('SV1', 1),
        ('SV42', 42),
        ('SV007', 7),
    ])
    def test_valid_numbers(self, bill_no, expected):
        assert parse_bill_number(bill_no) == expected

    @pytest.mark.parametrize('bill_no', ['', None, 'SV', 'SVabc', 'SV12a', 'XX5', 'sv3', 'SV\u00b2', 'SV\u0663'])
    def test_malformed_numbers_count_as_zero(self, bill_no):
        assert parse_bill_number(bill_no) == 0

    def test_custom_prefix(self):
        assert parse_bill_number('INV9', prefix='INV') == 9
        assert format_bill_number(10, prefix='INV') == 'INV10'

    def test_format(self):
        assert format_bill_number(1) == 'SV1'


class TestNextBillNumber:
    """Allocation against stored bills."""

    def test_first_bill_is_sv1(self, session):
        assert last_bill_number(session) == 0
        assert next_bill_number(session) == 'SV1'

    def test_uses_numeric_maximum(self, session):
        """SV10 beats SV9 even though it sorts lower as text."""
        _store_bills(session, 'SV9', 'SV10', 'SV2')
        assert next_bill_number(session) == 'SV11'

    def test_ignores_malformed_rows(self, session):
        _store_bills(session, 'SV3', 'SVX', 'MANUAL-77')
        assert next_bill_number(session) == 'SV4'

    def test_non_ascii_digits_do_not_break_allocation(self, session):
        _store_bills(session, 'SV3', 'SV²')
        assert next_bill_number(session) == 'SV4'

    def test_longer_malformed_rows_are_skipped(self, session):
        _store_bills(session, 'SV98', 'SV99', 'SV100', 'SVNOTE-12345', 'SV10x')
        assert next_bill_number(session) == 'SV101'

    def test_zero_padded_numbers_count(self, session):
        _store_bills(session, 'SV5', 'SV0012')
        assert next_bill_number(session) == 'SV13'

    def test_window_of_malformed_rows_falls_back_to_full_scan(self, session, monkeypatch):
        monkeypatch.setattr(bill_number_service, 'LOOKAHEAD_ROWS', 2)
        _store_bills(session, 'SV7', 'SVXXXXX1', 'SVXXXXX2', 'SVXXXXX3')
        assert next_bill_number(session) == 'SV8'

    def test_gap_after_delete_is_not_reused_below_max(self, session):
        _store_bills(session, 'SV1', 'SV2', 'SV3')
        session.query(Bill).filter(Bill.bill_no == 'SV2').delete()
        session.commit()
        assert next_bill_number(session) == 'SV4'

    def test_storage_failure_raises_storage_unavailable(self):
        class BrokenSession:
            def query(self, *args, **kwargs):
                raise OperationalError('SELECT bill_no FROM bills', {}, Exception('connection refused'))

        with pytest.raises(StorageUnavailable) as exc_info:
            next_bill_number(BrokenSession())

        assert exc_info.value.message == 'Failed to generate a new bill number'
        assert exc_info.value.status_code == 503

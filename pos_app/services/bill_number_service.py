"""Sequential bill number allocation (SV1, SV2, ...)."""
import logging
import zlib

from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError

from pos_app.database import translate_db_error
from pos_app.exceptions import StorageUnavailable
from pos_app.models import Bill

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = 'SV'
LOOKAHEAD_ROWS = 20


def parse_bill_number(bill_no: str, prefix: str = DEFAULT_PREFIX) -> int:
    """
    Return the numeric suffix of a bill number.

    Anything that is not ``<prefix><digits>`` counts as 0 so a malformed
    row can never break allocation.
    """
    if not bill_no or not bill_no.startswith(prefix):
        return 0
    suffix = bill_no[len(prefix):]
    if not (suffix.isascii() and suffix.isdecimal()):
        return 0
    return int(suffix)


def format_bill_number(number: int, prefix: str = DEFAULT_PREFIX) -> str:
    return f"{prefix}{number}"


def lock_allocation(session, prefix: str = DEFAULT_PREFIX) -> None:
    """
    Serialize allocation with concurrent checkouts for the rest of the transaction.

    PostgreSQL takes a transaction-scoped advisory lock. SQLite already holds
    the database write lock (BEGIN IMMEDIATE); other backends rely on the
    unique constraint on ``bills.bill_no`` plus the caller's retry.
    """
    dialect = session.get_bind().dialect.name
    if dialect == 'postgresql':
        key = zlib.crc32(f"bills:{prefix}".encode())
        session.execute(text("SELECT pg_advisory_xact_lock(:key)"), {'key': key})


def last_bill_number(session, prefix: str = DEFAULT_PREFIX) -> int:
    """
    Highest numeric suffix among stored bill numbers (0 when there are none).

    Well-formed numbers without leading zeros sort numerically when ordered by
    length and then text, so only the top few rows are read. Malformed rows in
    that window are skipped; zero-padded numbers are parsed separately.
    """
    try:
        matching = session.query(Bill.bill_no).filter(Bill.bill_no.like(f"{prefix}%"))
        top_rows = matching.filter(~Bill.bill_no.like(f"{prefix}0%")).order_by(
            func.length(Bill.bill_no).desc(), Bill.bill_no.desc()
        ).limit(LOOKAHEAD_ROWS).all()

        highest = _first_valid_number(top_rows, prefix)
        if highest is None and len(top_rows) == LOOKAHEAD_ROWS:
            # Window was all malformed rows; scan the rest
            highest = max((parse_bill_number(row.bill_no, prefix) for row in matching.all()), default=0)

        padded_rows = matching.filter(Bill.bill_no.like(f"{prefix}0%")).all()
    except SQLAlchemyError as e:
        logger.error(f"[BILLS] Could not read bill numbers: {e}")
        error = translate_db_error(e, 'Failed to generate a new bill number')
        if not isinstance(error, StorageUnavailable):
            error = StorageUnavailable('Failed to generate a new bill number', cause=e)
        raise error from e

    padded = [parse_bill_number(row.bill_no, prefix) for row in padded_rows]
    return max([highest or 0] + padded)


def _first_valid_number(rows, prefix: str):
    for row in rows:
        number = parse_bill_number(row.bill_no, prefix)
        if number:
            return number
    return None


def next_bill_number(session, prefix: str = DEFAULT_PREFIX) -> str:
    """
    Allocate the next bill number.

    Must run in the same transaction as the insert that uses it; call
    ``lock_allocation`` first so two checkouts cannot read the same maximum.
    """
    return format_bill_number(last_bill_number(session, prefix) + 1, prefix)

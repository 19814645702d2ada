"""Bills blueprint: checkout, bill history, deletion with stock restore and PDF export."""
from flask import Blueprint, request, jsonify, send_file, current_app, Response
from typing import Union

from pos_app.database import get_session
from pos_app.exceptions import BillNotFound, BusinessLogicError
from pos_app.services.bill_service import create_bill, delete_bill
from pos_app.services.bill_query_service import list_bills, get_bill, parse_date
from pos_app.services.invoice_pdf_service import generate_invoice_pdf

bills_bp = Blueprint('bills', __name__, url_prefix='/api')


def _business_info() -> dict:
    config = current_app.config
    return {
        'name': config.get('BUSINESS_NAME', ''),
        'address': config.get('BUSINESS_ADDRESS', ''),
        'phone': config.get('BUSINESS_PHONE', ''),
        'website': config.get('BUSINESS_WEBSITE', ''),
    }


@bills_bp.route('/bills', methods=['POST'])
def create() -> Union[Response, tuple]:
    """Check out a cart: allocate the bill number, store items, decrement stock."""
    payload = request.get_json(silent=True)
    if payload is None:
        raise BusinessLogicError('Request body must be JSON')

    config = current_app.config
    bill = create_bill(
        payload,
        get_session(),
        prefix=config.get('BILL_NUMBER_PREFIX', 'SV'),
        default_customer_name=config.get('DEFAULT_CUSTOMER_NAME', 'Walk-in Customer'),
        allow_negative_stock=config.get('ALLOW_NEGATIVE_STOCK', True),
        max_retries=config.get('BILL_NUMBER_RETRIES', 1)
    )
    return jsonify({'message': 'Bill generated successfully', 'bill': bill})


@bills_bp.route('/bills', methods=['GET'])
def index() -> Response:
    """List bills, optionally for one day (startDate) or a range (startDate..endDate)."""
    start_date = parse_date(request.args.get('startDate'), 'startDate')
    end_date = parse_date(request.args.get('endDate'), 'endDate')
    return jsonify(list_bills(get_session(), start_date, end_date))


@bills_bp.route('/bills/<bill_no>', methods=['GET'])
def detail(bill_no: str) -> Response:
    return jsonify(get_bill(get_session(), bill_no))


@bills_bp.route('/bills/<bill_no>', methods=['DELETE'])
def delete(bill_no: str) -> Response:
    result = delete_bill(bill_no, get_session())
    return jsonify({'message': result['message']})


@bills_bp.route('/download-bill/<bill_id>', methods=['GET'])
def download(bill_id: str) -> Union[Response, tuple]:
    """Stream the invoice PDF for a bill number."""
    try:
        pdf_buffer = generate_invoice_pdf(bill_id, get_session(), _business_info())
    except BillNotFound:
        current_app.logger.info(f"[BILLS] PDF requested for unknown bill {bill_id}")
        return Response('Bill not found', status=404, mimetype='text/plain')

    return send_file(
        pdf_buffer,
        mimetype='application/pdf',
        as_attachment=True,
        download_name=f'bill_{bill_id}.pdf'
    )

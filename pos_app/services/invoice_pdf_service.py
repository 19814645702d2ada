"""PDF invoice rendering for persisted bills."""

from datetime import datetime
from decimal import Decimal
from io import BytesIO
from typing import Dict, Any, List

from reportlab.lib.pagesizes import A4
from reportlab.lib import colors
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_CENTER
from xml.sax.saxutils import escape

from pos_app.services.bill_query_service import get_bill
from pos_app.utils.formatters import money, date_in


def build_invoice_table(detail: Dict[str, Any]) -> Dict[str, Any]:
    """
    Compute the rows and totals printed on an invoice.

    ``grand_total`` is the sum of the printed line amounts; the payable
    total is the bill's stored total.
    """
    bill = detail['bill']
    rows: List[List[str]] = [['Product', 'Qty', 'Price', 'Amount']]
    grand_total = Decimal('0.00')

    for item in detail['items']:
        price = Decimal(str(item['price']))
        qty = int(item['quantity'])
        amount = price * qty
        grand_total += amount
        rows.append([item['product_name'], str(qty), money(price), money(amount)])

    return {
        'rows': rows,
        'grand_total': grand_total,
        'gst_amount': Decimal(str(bill.get('gst_amount') or 0)),
        'discount': Decimal(str(bill.get('discount') or 0)),
        'total_payable': Decimal(str(bill['total']))
    }


def render_invoice_pdf(detail: Dict[str, Any], business_info: Dict[str, Any]) -> BytesIO:
    """
    Render a bill detail (as returned by ``get_bill``) into an A4 PDF.

    Args:
        detail: {'bill': {...}, 'items': [...]}
        business_info: name, address, phone, website for the header

    Returns:
        BytesIO positioned at 0
    """
    bill = detail['bill']
    table = build_invoice_table(detail)

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=0.7*inch,
        leftMargin=0.7*inch,
        topMargin=0.7*inch,
        bottomMargin=0.7*inch,
        title=f"Bill {bill['bill_no']}"
    )

    elements = []
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'ShopTitle',
        parent=styles['Heading1'],
        fontSize=22,
        alignment=TA_CENTER,
        fontName='Helvetica-Bold',
        spaceAfter=6
    )
    header_style = ParagraphStyle(
        'ShopHeader',
        parent=styles['Normal'],
        fontSize=10,
        alignment=TA_CENTER,
        spaceAfter=2
    )
    subtitle_style = ParagraphStyle(
        'InvoiceTitle',
        parent=styles['Heading2'],
        fontSize=14,
        alignment=TA_CENTER,
        fontName='Helvetica-Bold',
        spaceBefore=12,
        spaceAfter=12
    )

    # 1. Shop header
    elements.append(Paragraph(escape(business_info.get('name') or ''), title_style))
    if business_info.get('address'):
        elements.append(Paragraph(escape(business_info['address']), header_style))
    if business_info.get('phone'):
        elements.append(Paragraph(f"Phone: {escape(business_info['phone'])}", header_style))
    if business_info.get('website'):
        elements.append(Paragraph(f"Website: {escape(business_info['website'])}", header_style))

    elements.append(Paragraph("<u>Invoice / Bill</u>", subtitle_style))

    # 2. Bill info
    created_at = bill.get('created_at') or datetime.now()
    info_table = Table([
        ['Bill No:', bill['bill_no']],
        ['Date:', date_in(created_at)],
        ['Customer:', bill.get('customer_name') or 'N/A'],
    ], colWidths=[1.2*inch, 4*inch])
    info_table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 11),
        ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
    ]))
    elements.append(info_table)
    elements.append(Spacer(1, 0.25*inch))

    # 3. Items table (repeats its header on every page)
    items_table = Table(table['rows'], colWidths=[3.3*inch, 0.8*inch, 1.1*inch, 1.3*inch], repeatRows=1)
    items_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#F0F0F0')),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 11),
        ('ALIGN', (1, 0), (1, -1), 'CENTER'),
        ('ALIGN', (2, 0), (3, -1), 'RIGHT'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.black),
    ]))
    elements.append(items_table)
    elements.append(Spacer(1, 0.2*inch))

    # 4. Totals
    totals_table = Table([
        ['Grand Total:', money(table['grand_total'])],
        ['GST:', money(table['gst_amount'])],
        ['Discount:', money(table['discount'])],
        ['Total Payable:', money(table['total_payable'])],
    ], colWidths=[5.2*inch, 1.3*inch])
    totals_table.setStyle(TableStyle([
        ('ALIGN', (0, 0), (-1, -1), 'RIGHT'),
        ('FONTNAME', (0, 0), (-1, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 11),
        ('LINEABOVE', (0, 0), (-1, 0), 1, colors.black),
        ('LINEABOVE', (0, -1), (-1, -1), 1, colors.black),
    ]))
    elements.append(totals_table)
    elements.append(Spacer(1, 0.5*inch))

    footer_style = ParagraphStyle('Footer', parent=styles['Normal'], fontSize=10,
                                  fontName='Helvetica-Oblique', alignment=TA_CENTER)
    elements.append(Paragraph("Thank you for your purchase!", footer_style))

    doc.build(elements)
    buffer.seek(0)
    return buffer


def generate_invoice_pdf(bill_no: str, session, business_info: Dict[str, Any]) -> BytesIO:
    """Look up a bill and render it. Raises BillNotFound when absent."""
    return render_invoice_pdf(get_bill(session, bill_no), business_info)

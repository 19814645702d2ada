"""Shop settings (GST number/rate/toggle and receipt paper size)."""
import logging
from decimal import Decimal, InvalidOperation

from pos_app.models import Setting
from pos_app.exceptions import BusinessLogicError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = {
    'gst_number': '',
    'gst_rate': Decimal('18'),
    'enable_gst': False,
    'paper_size': '58mm'
}


def get_settings(session) -> Setting:
    """Return the settings row, creating it with defaults if missing."""
    settings = session.query(Setting).order_by(Setting.id).first()
    if settings is None:
        settings = Setting(**DEFAULT_SETTINGS)
        session.add(settings)
        session.commit()
    return settings


def update_settings(session, data: dict) -> Setting:
    """Update gst_number, gst_rate, enable_gst and paper_size."""
    settings = get_settings(session)

    if 'gst_number' in data:
        settings.gst_number = (data.get('gst_number') or '').strip()

    if 'gst_rate' in data:
        try:
            rate = Decimal(str(data.get('gst_rate'))).quantize(Decimal('0.01'))
        except (InvalidOperation, ValueError):
            raise BusinessLogicError('gst_rate must be a number')
        if rate < 0 or rate > 100:
            raise BusinessLogicError('gst_rate must be between 0 and 100')
        settings.gst_rate = rate

    if 'enable_gst' in data:
        settings.enable_gst = _parse_bool(data.get('enable_gst'))

    if data.get('paper_size'):
        settings.paper_size = str(data['paper_size']).strip()

    session.commit()
    logger.info(f"Settings updated: gst_rate={settings.gst_rate}, enable_gst={settings.enable_gst}")
    return settings


def _parse_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)

"""Dashboard blueprint for today's metrics."""
from flask import Blueprint, jsonify, current_app, Response

from pos_app.database import get_session
from pos_app.services.dashboard_service import get_dashboard_data, get_today_datetime_range

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/api')


@dashboard_bp.route('/dashboard', methods=['GET'])
def index() -> Response:
    """Today's revenue, order count, distinct customers and the latest bills."""
    start_dt, end_dt = get_today_datetime_range()
    data = get_dashboard_data(
        get_session(),
        start_dt,
        end_dt,
        recent_limit=current_app.config.get('DASHBOARD_RECENT_LIMIT', 5)
    )
    return jsonify(data)

"""Settings blueprint: GST configuration and receipt paper size."""
from flask import Blueprint, request, jsonify, Response

from pos_app.database import get_session
from pos_app.exceptions import BusinessLogicError
from pos_app.services import settings_service

settings_bp = Blueprint('settings', __name__, url_prefix='/api')


@settings_bp.route('/settings', methods=['GET'])
def get_settings() -> Response:
    return jsonify(settings_service.get_settings(get_session()).to_dict())


@settings_bp.route('/settings', methods=['PUT'])
def update_settings() -> Response:
    data = request.get_json(silent=True)
    if data is None:
        raise BusinessLogicError('Request body must be JSON')
    settings_service.update_settings(get_session(), data)
    return jsonify({'message': 'Settings updated successfully'})

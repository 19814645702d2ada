"""Authentication blueprint: login, registration and credential changes."""
from flask import Blueprint, request, jsonify, Response

from pos_app.database import get_session
from pos_app.services import auth_service

auth_bp = Blueprint('auth', __name__, url_prefix='/api')


def _credentials():
    data = request.get_json(silent=True) or request.form
    return data.get('email'), data.get('password')


@auth_bp.route('/login', methods=['POST'])
def login() -> Response:
    email, password = _credentials()
    auth_service.authenticate(get_session(), email, password)
    return jsonify({'message': 'Login successful'})


@auth_bp.route('/register', methods=['POST'])
def register() -> Response:
    email, password = _credentials()
    auth_service.register_admin(get_session(), email, password)
    return jsonify({'message': 'Registration successful'})


@auth_bp.route('/admin/credentials', methods=['PUT'])
def update_credentials() -> Response:
    email, password = _credentials()
    auth_service.update_credentials(get_session(), email, password)
    return jsonify({'message': 'Credentials updated successfully'})

"""Main blueprint: health check, uploaded images and the single-page frontend."""
import os

from flask import Blueprint, jsonify, send_from_directory, current_app, abort

from pos_app.database import ping

main_bp = Blueprint('main', __name__)


@main_bp.route('/health')
def health():
    """
    Health check endpoint that validates database connection.

    Returns:
        200: Healthy (DB connected)
        503: Unhealthy (DB error)
    """
    try:
        if ping() == 1:
            return jsonify({
                'status': 'healthy',
                'database': 'connected'
            }), 200
        return jsonify({
            'status': 'unhealthy',
            'database': 'error',
            'message': 'Unexpected query result'
        }), 503

    except Exception as e:
        current_app.logger.error(f"Health check failed: {e}")
        return jsonify({
            'status': 'unhealthy',
            'database': 'disconnected',
            'error': str(e)
        }), 503


@main_bp.route('/uploads/<path:filename>')
def uploaded_file(filename):
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)


@main_bp.route('/', defaults={'path': ''})
@main_bp.route('/<path:path>')
def frontend(path):
    """Serve frontend assets, falling back to index.html for client-side routes."""
    if path.startswith('api/'):
        abort(404)

    folder = current_app.config['FRONTEND_FOLDER']
    if path and os.path.isfile(os.path.join(folder, path)):
        return send_from_directory(folder, path)

    if os.path.isfile(os.path.join(folder, 'index.html')):
        return send_from_directory(folder, 'index.html')

    abort(404)

"""
Home Routes
===========

- GET / -- landing page
- GET /privacy -- privacy page
- 404 / 500 handlers for the whole app
"""

import logging

from flask import current_app, jsonify, render_template, request

from cloudsoft.core import LoggingService
from . import home_bp

logger = logging.getLogger(__name__)


@home_bp.route('/')
def index():
    """Home page"""
    registry = current_app.extensions['cloudsoft'].registry
    return render_template('home/index.html', subscriber_count=registry.count())


@home_bp.route('/privacy')
def privacy():
    """Privacy page"""
    return render_template('home/privacy.html')


def _error_response(status_code, message):
    if request.path.startswith('/api/'):
        return jsonify({'error': message}), status_code
    return render_template('home/error.html', status_code=status_code, message=message), status_code


@home_bp.app_errorhandler(404)
def not_found(error):
    return _error_response(404, 'The page you were looking for does not exist.')


@home_bp.app_errorhandler(500)
def internal_error(error):
    original = getattr(error, 'original_exception', None) or error
    logger.error(f"Unhandled error on {request.path}: {original}")
    LoggingService.log_error_with_traceback('app', original, {'path': request.path})
    return _error_response(500, 'An unexpected error occurred while processing your request.')

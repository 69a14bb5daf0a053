"""
Newsletter Routes
=================

Pages (newsletter_bp):
- GET  /newsletter/subscribe -- sign-up form
- POST /newsletter/subscribe -- process sign-up form
- GET  /newsletter/subscribers -- active subscriber list
- GET  /newsletter/unsubscribe -- opt-out form
- POST /newsletter/unsubscribe -- process opt-out form

API (newsletter_api_bp):
- POST /api/newsletter, /api/newsletter/subscribe -- subscribe
- POST /api/newsletter/unsubscribe -- opt out
- GET  /api/newsletter/subscribers -- export active subscribers
- GET  /api/newsletter/stats -- subscriber count

Exported helpers:
- get_registry()
- get_notifier()
- validate_email(email)
"""

import logging
import re
from datetime import datetime

from flask import current_app, flash, jsonify, redirect, render_template, request, url_for

from cloudsoft.core import db_log
from . import newsletter_api_bp, newsletter_bp
from .registry import Subscriber, SubscriptionError

# Email validation regex - rejects consecutive dots, leading/trailing dots
EMAIL_REGEX = re.compile(r'^[a-zA-Z0-9_%+-]+(\.[a-zA-Z0-9_%+-]+)*@[a-zA-Z0-9-]+(\.[a-zA-Z0-9-]+)*\.[a-zA-Z]{2,}$')

MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 100

logger = logging.getLogger(__name__)

# Business failures -> HTTP status for the JSON API
_ERROR_STATUS = {
    SubscriptionError.DUPLICATE_SUBSCRIPTION: 409,
    SubscriptionError.NOT_FOUND: 404,
    SubscriptionError.INVALID_EMAIL: 400,
}


def _extension():
    ext = current_app.extensions.get('cloudsoft')
    if ext is None:
        raise RuntimeError("CloudSoft is not initialised on this app. Call CloudSoft(app) first.")
    return ext


def get_registry():
    """The SubscriberRegistry owned by the current app"""
    return _extension().registry


def get_notifier():
    """The subscription notifier owned by the current app"""
    return _extension().notifier


def validate_email(email):
    """Validate email format"""
    if not email or len(email) > MAX_EMAIL_LENGTH:
        return False
    return EMAIL_REGEX.match(email.lower().strip()) is not None


def _validate_signup(name, email):
    """Return a dict of field -> error message, empty when valid"""
    errors = {}
    if not email:
        errors['email'] = 'Email address is required'
    elif not validate_email(email):
        errors['email'] = 'Please enter a valid email address'
    if name and len(name) > MAX_NAME_LENGTH:
        errors['name'] = f'Name must be {MAX_NAME_LENGTH} characters or fewer'
    return errors


def _request_data():
    """JSON body or form fields, whichever the client sent"""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form


def _text_field(data, key):
    """Stripped string value of a body field.

    Missing fields give ''. Non-string JSON values (numbers, lists, objects)
    give None so the caller can answer 400.
    """
    value = data.get(key)
    if value is None:
        return ''
    if not isinstance(value, str):
        return None
    return value.strip()


def _notify(event, payload):
    """Call the notifier without letting its failures reach the request"""
    try:
        notifier = get_notifier()
        if event == 'added':
            notifier.subscriber_added(payload)
        else:
            notifier.subscriber_removed(payload)
    except Exception as e:
        logger.error(f"Subscription notifier failed ({event}): {e}")
        db_log('error', 'newsletter', f'Notifier failed on {event}', {'error': str(e)})


def _sign_up(name, email):
    result = get_registry().sign_up(Subscriber(email=email, name=name))
    if result.is_success:
        _notify('added', result.subscriber)
    return result


def _opt_out(email):
    result = get_registry().opt_out(email)
    if result.is_success:
        _notify('removed', result.subscriber.email)
    return result


# ===================
# PAGES
# ===================

@newsletter_bp.route('/subscribe', methods=['GET'])
def subscribe_page():
    """Show the sign-up form"""
    return render_template('newsletter/subscribe.html', form={}, errors={})


@newsletter_bp.route('/subscribe', methods=['POST'])
def subscribe():
    """Handle the sign-up form"""
    name = request.form.get('name', '').strip()
    email = request.form.get('email', '').strip()

    errors = _validate_signup(name, email)
    if errors:
        return render_template(
            'newsletter/subscribe.html',
            form={'name': name, 'email': email},
            errors=errors
        ), 400

    result = _sign_up(name, email)
    flash(result.message, 'success' if result.is_success else 'error')
    return redirect(url_for('newsletter.subscribe_page'))


@newsletter_bp.route('/subscribers', methods=['GET'])
def subscribers_page():
    """Show all active subscribers"""
    subscribers = get_registry().list_active()
    return render_template('newsletter/subscribers.html', subscribers=subscribers)


@newsletter_bp.route('/unsubscribe', methods=['GET'])
def unsubscribe_page():
    """Show the opt-out form"""
    email = request.args.get('email', '')
    return render_template('newsletter/unsubscribe.html', email=email, error=None)


@newsletter_bp.route('/unsubscribe', methods=['POST'])
def unsubscribe():
    """Handle the opt-out form"""
    email = request.form.get('email', '').strip()

    if not validate_email(email):
        return render_template(
            'newsletter/unsubscribe.html',
            email=email,
            error='Please enter a valid email address'
        ), 400

    result = _opt_out(email)
    if result.is_success:
        flash(result.message, 'success')
        return redirect(url_for('newsletter.subscribers_page'))

    flash(result.message, 'error')
    return redirect(url_for('newsletter.unsubscribe_page', email=email))


# ===================
# JSON API
# ===================

def _failure_response(result):
    return jsonify({
        'error': result.message,
        'code': result.error.value
    }), _ERROR_STATUS.get(result.error, 400)


@newsletter_api_bp.route('', methods=['POST'])
@newsletter_api_bp.route('/subscribe', methods=['POST'])
def api_subscribe():
    """Subscribe via JSON or form body: {"name": ..., "email": ...}"""
    try:
        data = _request_data()
        name = _text_field(data, 'name')
        email = _text_field(data, 'email')

        errors = {}
        if name is None:
            errors['name'] = 'Name must be text'
        if email is None:
            errors['email'] = 'Please enter a valid email address'
        if not errors:
            errors = _validate_signup(name, email)
        if errors:
            return jsonify({'error': next(iter(errors.values())), 'fields': errors}), 400

        result = _sign_up(name, email)
        if not result.is_success:
            return _failure_response(result)

        return jsonify({
            'message': result.message,
            'subscriber': result.subscriber.to_dict()
        }), 201

    except Exception as e:
        logger.error(f"Error in api_subscribe: {e}")
        db_log('error', 'newsletter', 'Error in api_subscribe', {'error': str(e)})
        return jsonify({'error': 'An unexpected error occurred'}), 500


@newsletter_api_bp.route('/unsubscribe', methods=['POST'])
def api_unsubscribe():
    """Opt out via JSON or form body: {"email": ...}"""
    try:
        data = _request_data()
        email = _text_field(data, 'email')

        if email is None:
            return jsonify({'error': 'Please enter a valid email address'}), 400
        if not email:
            return jsonify({'error': 'Email address is required'}), 400
        if not validate_email(email):
            return jsonify({'error': 'Please enter a valid email address'}), 400

        result = _opt_out(email)
        if not result.is_success:
            return _failure_response(result)

        return jsonify({'message': result.message}), 200

    except Exception as e:
        logger.error(f"Error in api_unsubscribe: {e}")
        db_log('error', 'newsletter', 'Error in api_unsubscribe', {'error': str(e)})
        return jsonify({'error': 'An unexpected error occurred'}), 500


@newsletter_api_bp.route('/subscribers', methods=['GET'])
def api_subscribers():
    """Export the active subscriber list"""
    subscribers = [s.to_dict() for s in get_registry().list_active()]
    return jsonify({
        'subscribers': subscribers,
        'total_count': len(subscribers),
        'exported_at': datetime.now().isoformat()
    }), 200


@newsletter_api_bp.route('/stats', methods=['GET'])
def api_stats():
    """Get subscriber statistics"""
    registry = get_registry()
    last_updated = registry.latest_signup()
    return jsonify({
        'count': registry.count(),
        'last_updated': last_updated.isoformat() if last_updated else None
    }), 200

"""
Newsletter Module
=================

Provides:
- Sign-up, opt-out and subscriber list pages (/newsletter/*)
- JSON API for the same operations plus stats and export (/api/newsletter/*)
- The in-memory SubscriberRegistry and subscription notifiers

Usage:
    from cloudsoft.modules.newsletter import newsletter_bp, newsletter_api_bp

    app.register_blueprint(newsletter_bp)      # Registers at /newsletter
    app.register_blueprint(newsletter_api_bp)  # Registers at /api/newsletter

Both blueprints expect a CloudSoft extension on the app, which owns the registry.
"""

from flask import Blueprint

newsletter_bp = Blueprint(
    'newsletter',
    __name__,
    url_prefix='/newsletter',
    template_folder='templates'
)

newsletter_api_bp = Blueprint(
    'newsletter_api',
    __name__,
    url_prefix='/api/newsletter'
)

from .registry import (
    Subscriber,
    SubscriberRegistry,
    SubscriptionError,
    SubscriptionResult,
    normalize_email,
)
from .notifications import LogNotifier, WebhookNotifier, build_notifier
from . import routes

__all__ = [
    'newsletter_bp', 'newsletter_api_bp',
    'Subscriber', 'SubscriberRegistry', 'SubscriptionError', 'SubscriptionResult',
    'normalize_email', 'LogNotifier', 'WebhookNotifier', 'build_notifier',
]

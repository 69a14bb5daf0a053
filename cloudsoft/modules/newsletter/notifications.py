"""
Subscription Notifications
==========================

Capability told about subscription changes after the registry accepts them.

- LogNotifier: records events through the logging service (default)
- WebhookNotifier: POSTs a JSON event to NEWSLETTER_WEBHOOK_URL

Neither sends email. Notifier failures are logged and never reach the caller.
"""

import logging
from datetime import datetime
from typing import Protocol

import requests

from cloudsoft.core import LoggingService, db_log

logger = logging.getLogger(__name__)


class SubscriptionNotifier(Protocol):
    def subscriber_added(self, subscriber):
        ...

    def subscriber_removed(self, email):
        ...


class LogNotifier:
    """Default notifier: writes the event to the application log"""

    def subscriber_added(self, subscriber):
        LoggingService.log_user_action('newsletter', 'subscribe',
                                       details={'email': subscriber.email, 'name': subscriber.name})

    def subscriber_removed(self, email):
        LoggingService.log_user_action('newsletter', 'unsubscribe', details={'email': email})


class WebhookNotifier:
    """POSTs subscription events as JSON to an admin webhook"""

    def __init__(self, url, timeout=5, session=None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _post(self, payload):
        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            logger.info(f"Webhook delivered: {payload['event']} ({response.status_code})")
            return True
        except requests.RequestException as e:
            logger.error(f"Webhook delivery failed for {payload['event']}: {e}")
            db_log('error', 'newsletter', 'Webhook delivery failed',
                   {'event': payload['event'], 'error': str(e)})
            return False

    def subscriber_added(self, subscriber):
        return self._post({
            'event': 'subscriber.added',
            'email': subscriber.email,
            'name': subscriber.name,
            'timestamp': datetime.now().isoformat(),
        })

    def subscriber_removed(self, email):
        return self._post({
            'event': 'subscriber.removed',
            'email': email,
            'name': None,
            'timestamp': datetime.now().isoformat(),
        })


def build_notifier(config):
    """Pick the notifier for an app config mapping"""
    url = config.get('NEWSLETTER_WEBHOOK_URL')
    if url:
        logger.info(f"Newsletter notifications go to webhook: {url}")
        return WebhookNotifier(url, timeout=float(config.get('NEWSLETTER_WEBHOOK_TIMEOUT', 5)))
    return LogNotifier()
